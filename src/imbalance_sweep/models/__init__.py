from .base import BinaryClassifier
from .ensemble import EnsembleTree
from .linear import LinearProbabilistic


def make_classifier(kind: str, random_state=None, **params) -> BinaryClassifier:
    kind_l = (kind or 'logistic').lower()
    if kind_l in ('logistic', 'linear', 'logreg'):
        return LinearProbabilistic(random_state=random_state, **params)
    elif kind_l in ('forest', 'random_forest', 'rf'):
        return EnsembleTree(backend='random_forest', random_state=random_state, **params)
    elif kind_l in ('xgboost', 'xgb'):
        return EnsembleTree(backend='xgboost', random_state=random_state, **params)
    else:
        raise ValueError(f"Unknown classifier: {kind}")


__all__ = ['BinaryClassifier', 'EnsembleTree', 'LinearProbabilistic', 'make_classifier']

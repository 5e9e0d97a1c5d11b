from __future__ import annotations
import numpy as np

from ..errors import DegenerateTrainingSet


class BinaryClassifier:
    """fit/positive_proba wrapper around a scikit-learn style estimator.

    Labels are 0/1 with 1 the positive class. Subclasses provide ``_build``.
    """
    threshold = 0.5

    def __init__(self, random_state=None):
        self.random_state = random_state
        self.estimator = None
        self.is_fit = False

    def _build(self):
        raise NotImplementedError

    def fit(self, X, y):
        y = np.asarray(y).astype(int)
        classes = np.unique(y)
        if len(classes) < 2:
            raise DegenerateTrainingSet(f"Training labels contain only {classes.tolist()}")
        self.estimator = self._build()
        self.estimator.fit(X, y)
        self.is_fit = True
        return self

    def positive_proba(self, X) -> np.ndarray:
        if not self.is_fit:
            raise RuntimeError(f"{type(self).__name__} is not fitted")
        proba = self.estimator.predict_proba(X)
        pos_col = list(self.estimator.classes_).index(1)
        return proba[:, pos_col]

    def predict(self, X) -> np.ndarray:
        return (self.positive_proba(X) > self.threshold).astype(int)

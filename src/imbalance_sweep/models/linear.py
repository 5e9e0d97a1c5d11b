from __future__ import annotations
import warnings
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from .base import BinaryClassifier


class LinearProbabilistic(BinaryClassifier):
    """Standardised logistic regression with a capped iteration budget.

    Oversampled training sets contain exact duplicates; hitting ``max_iter``
    is reported through ``converged`` instead of a warning.
    """

    def __init__(self, C=1.0, max_iter=1000, random_state=None):
        super().__init__(random_state=random_state)
        self.C = C
        self.max_iter = max_iter
        self.converged = None

    def _build(self):
        return Pipeline([
            ('scale', StandardScaler()),
            ('logreg', LogisticRegression(C=self.C, max_iter=self.max_iter, random_state=self.random_state)),
        ])

    def fit(self, X, y):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always', ConvergenceWarning)
            super().fit(X, y)
        self.converged = True
        for w in caught:
            if issubclass(w.category, ConvergenceWarning):
                self.converged = False
            else:
                warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)
        return self

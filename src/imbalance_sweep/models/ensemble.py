from __future__ import annotations
import numpy as np
from sklearn.ensemble import RandomForestClassifier
from sklearn.utils import check_random_state
from xgboost import XGBClassifier

from .base import BinaryClassifier

BACKENDS = ('random_forest', 'xgboost')


class EnsembleTree(BinaryClassifier):
    """Tree ensemble: a random forest, or gradient-boosted trees with ``backend='xgboost'``."""

    def __init__(self, backend='random_forest', n_estimators=200, max_depth=None, random_state=None, n_jobs=None):
        super().__init__(random_state=random_state)
        if backend not in BACKENDS:
            raise ValueError(f"Unknown ensemble backend: {backend}")
        self.backend = backend
        self.n_estimators = n_estimators
        self.max_depth = max_depth
        self.n_jobs = n_jobs

    def _build(self):
        if self.backend == 'xgboost':
            # xgboost only takes an integer seed
            seed = int(check_random_state(self.random_state).randint(np.iinfo(np.int32).max))
            return XGBClassifier(
                n_estimators=self.n_estimators,
                max_depth=self.max_depth or 4,
                learning_rate=0.1,
                subsample=0.9,
                colsample_bytree=0.9,
                reg_lambda=1.0,
                eval_metric='logloss',
                random_state=seed,
                n_jobs=self.n_jobs,
            )
        return RandomForestClassifier(
            n_estimators=self.n_estimators,
            max_depth=self.max_depth,
            random_state=self.random_state,
            n_jobs=self.n_jobs,
        )

from __future__ import annotations
from dataclasses import dataclass
import math

import numpy as np
import pandas as pd
from imblearn.over_sampling import RandomOverSampler, SMOTE

from .errors import InsufficientSyntheticRows

SYNTHETIC_COL = 'synthetic'


@dataclass(frozen=True)
class AugmentResult:
    train_set: pd.DataFrame
    synthetic_added: int
    requested: int
    replaced: bool = False

    @property
    def insufficient(self) -> bool:
        return self.synthetic_added < self.requested


def _split_xy(train_set: pd.DataFrame, label_col: str):
    X = train_set.drop(columns=[c for c in (label_col, SYNTHETIC_COL) if c in train_set.columns])
    return X, train_set[label_col]


def _rows_frame(X: np.ndarray, labels, columns, label_col: str, synthetic: bool) -> pd.DataFrame:
    rows = pd.DataFrame(np.asarray(X, dtype=float), columns=list(columns))
    rows[label_col] = np.asarray(labels, dtype=object)
    if synthetic:
        rows[SYNTHETIC_COL] = True
    return rows


def kernel_smoothed_draw(X_class: np.ndarray, n_samples: int, rng, shrinkage: float = 1.0) -> np.ndarray:
    """Resample rows of one class and perturb them with a Gaussian kernel.

    The kernel is diagonal with per-feature bandwidth
    ``shrinkage * (4 / ((d + 2) * n)) ** (1 / (d + 4)) * std_j`` (Silverman's
    rule, as used by ROSE).
    """
    n_class, n_features = X_class.shape
    if n_samples <= 0 or n_class == 0:
        return np.empty((0, n_features))
    if n_class > 1:
        sd = X_class.std(axis=0, ddof=1)
        h = (4.0 / ((n_features + 2.0) * n_class)) ** (1.0 / (n_features + 4.0))
        bandwidth = shrinkage * h * sd
    else:
        bandwidth = np.zeros(n_features)
    seeds = X_class[rng.randint(0, n_class, size=n_samples)]
    return seeds + rng.normal(size=(n_samples, n_features)) * bandwidth


def kernel_resample(X: np.ndarray, y: np.ndarray, n_samples: int, minority_label, majority_label,
                    rng, p_minority: float = 0.5, shrinkage: float = 1.0):
    """Draw a synthetic pool whose class of each row is minority with probability ``p_minority``.

    Rows of a class with no source rows cannot be generated and are left out.
    """
    is_minority = rng.uniform(size=n_samples) < p_minority
    X_parts, y_parts = [], []
    for label, n_label in ((minority_label, int(is_minority.sum())), (majority_label, int((~is_minority).sum()))):
        drawn = kernel_smoothed_draw(X[y == label], n_label, rng, shrinkage=shrinkage)
        X_parts.append(drawn)
        y_parts.append(np.full(len(drawn), label, dtype=object))
    return np.vstack(X_parts), np.concatenate(y_parts)


class Augmentation:
    """Base strategy: appends the rows from ``extra_rows`` to the training set."""
    name = 'none'

    def requested_count(self, train_set, label_col, minority_label, majority_label, additional_count) -> int:
        return additional_count

    def extra_rows(self, train_set, label_col, minority_label, majority_label, additional_count, rng) -> pd.DataFrame:
        return train_set.iloc[:0]

    def apply(self, train_set: pd.DataFrame, label_col: str, minority_label, majority_label, plan, rng) -> AugmentResult:
        requested = self.requested_count(train_set, label_col, minority_label, majority_label, plan.synthetic_target)
        if requested <= 0:
            return AugmentResult(train_set, 0, 0)
        rows = self.extra_rows(train_set, label_col, minority_label, majority_label, requested, rng)
        if len(rows) == 0:
            return AugmentResult(train_set, 0, requested)
        if SYNTHETIC_COL in rows.columns and SYNTHETIC_COL not in train_set.columns:
            train_set = train_set.assign(**{SYNTHETIC_COL: False})
        combined = pd.concat([train_set, rows], ignore_index=True)
        return AugmentResult(combined, len(rows), requested)


class NoAugmentation(Augmentation):
    name = 'none'

    def requested_count(self, train_set, label_col, minority_label, majority_label, additional_count) -> int:
        return 0


class OversampleAugmentation(Augmentation):
    """Duplicate minority rows with replacement until both classes have the same count."""
    name = 'oversample'

    def requested_count(self, train_set, label_col, minority_label, majority_label, additional_count) -> int:
        counts = train_set[label_col].value_counts()
        return max(0, int(counts.get(majority_label, 0)) - int(counts.get(minority_label, 0)))

    def extra_rows(self, train_set, label_col, minority_label, majority_label, additional_count, rng) -> pd.DataFrame:
        X, y = _split_xy(train_set, label_col)
        n_majority = int((y == majority_label).sum())
        if not (y == minority_label).any():
            return train_set.iloc[:0]
        ros = RandomOverSampler(sampling_strategy={minority_label: n_majority}, random_state=rng)
        X_res, y_res = ros.fit_resample(X, y)
        n_orig = len(X)
        return _rows_frame(np.asarray(X_res)[n_orig:], np.asarray(y_res)[n_orig:], X.columns, label_col, synthetic=False)


class SyntheticKNNAugmentation(Augmentation):
    """SMOTE interpolation between minority rows and their k nearest minority neighbours.

    SMOTE is asked for a whole multiple of the minority count; the first
    ``additional_count`` synthetic minority rows are kept. If it cannot deliver
    that many the trial runs without augmentation.
    """
    name = 'smote'

    def __init__(self, k_neighbors: int = 5):
        self.k_neighbors = k_neighbors

    def _smote_rows(self, train_set, label_col, minority_label, additional_count, rng) -> pd.DataFrame:
        X, y = _split_xy(train_set, label_col)
        n_minority = int((y == minority_label).sum())
        if n_minority <= self.k_neighbors:
            raise InsufficientSyntheticRows(additional_count, 0)
        dup_size = math.ceil(additional_count / n_minority)
        sm = SMOTE(sampling_strategy={minority_label: n_minority * (1 + dup_size)},
                   k_neighbors=self.k_neighbors, random_state=rng)
        X_res, y_res = sm.fit_resample(X, y)
        n_orig = len(X)
        X_tail, y_tail = np.asarray(X_res)[n_orig:], np.asarray(y_res)[n_orig:]
        X_synth = X_tail[y_tail == minority_label]
        if len(X_synth) < additional_count:
            raise InsufficientSyntheticRows(additional_count, len(X_synth))
        return _rows_frame(X_synth[:additional_count], [minority_label] * additional_count,
                           X.columns, label_col, synthetic=True)

    def extra_rows(self, train_set, label_col, minority_label, majority_label, additional_count, rng) -> pd.DataFrame:
        try:
            return self._smote_rows(train_set, label_col, minority_label, additional_count, rng)
        except InsufficientSyntheticRows:
            return train_set.iloc[:0]


class SyntheticKernelAugmentation(Augmentation):
    """Kernel-smoothed resampling from a fixed-size, class-balanced synthetic pool.

    Only minority rows of the pool are used; when fewer than requested are
    available the shortfall is dropped.
    """
    name = 'kernel'

    def __init__(self, pool_size: int = 1000, shrinkage: float = 1.0, p_minority: float = 0.5):
        self.pool_size = pool_size
        self.shrinkage = shrinkage
        self.p_minority = p_minority

    def extra_rows(self, train_set, label_col, minority_label, majority_label, additional_count, rng) -> pd.DataFrame:
        X, y = _split_xy(train_set, label_col)
        X_pool, y_pool = kernel_resample(
            X.to_numpy(dtype=float), y.to_numpy(), self.pool_size, minority_label, majority_label,
            rng, p_minority=self.p_minority, shrinkage=self.shrinkage,
        )
        X_min = X_pool[y_pool == minority_label]
        n_keep = min(len(X_min), additional_count)
        keep = rng.choice(len(X_min), size=n_keep, replace=False)
        return _rows_frame(X_min[keep], [minority_label] * n_keep, X.columns, label_col, synthetic=True)


class SyntheticReplaceBothAugmentation(Augmentation):
    """From ``start_idx`` on, replace the real training rows of both groups by kernel-smoothed rows.

    The replacement has exactly the planned training count for each group,
    GroupA being the minority.
    """
    name = 'kernel-replace-both'

    def __init__(self, start_idx: int = 2, shrinkage: float = 1.0):
        self.start_idx = start_idx
        self.shrinkage = shrinkage

    def apply(self, train_set: pd.DataFrame, label_col: str, minority_label, majority_label, plan, rng) -> AugmentResult:
        if plan.idx < self.start_idx:
            return AugmentResult(train_set, 0, 0)
        X, y = _split_xy(train_set, label_col)
        X_arr, y_arr = X.to_numpy(dtype=float), y.to_numpy()
        targets = ((minority_label, plan.group_a_train_target), (majority_label, plan.group_b_train_target))
        parts = []
        for label, target in targets:
            drawn = kernel_smoothed_draw(X_arr[y_arr == label], target, rng, shrinkage=self.shrinkage)
            parts.append(_rows_frame(drawn, [label] * len(drawn), X.columns, label_col, synthetic=True))
        replacement = pd.concat(parts, ignore_index=True)
        requested = sum(t for _, t in targets)
        return AugmentResult(replacement, len(replacement), requested, replaced=True)


def make_augmentation(kind: str, **params) -> Augmentation:
    kind_l = (kind or 'none').lower()
    if kind_l == 'none':
        return NoAugmentation()
    elif kind_l in ('oversample', 'duplicate', 'random-oversample'):
        return OversampleAugmentation()
    elif kind_l in ('smote', 'knn', 'synthetic-knn'):
        return SyntheticKNNAugmentation(**params)
    elif kind_l in ('kernel', 'rose', 'synthetic-kernel'):
        return SyntheticKernelAugmentation(**params)
    elif kind_l in ('kernel-replace-both', 'rose-both', 'replace-both'):
        return SyntheticReplaceBothAugmentation(**params)
    else:
        raise ValueError(f"Unknown augmentation: {kind}")

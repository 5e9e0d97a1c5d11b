import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

import numpy as np
import pandas as pd
from sklearn.utils import check_random_state

from .preprocess import preprocess_df

GROUP_A = 'A'
GROUP_B = 'B'
LABEL_COL = 'group'


def simulate_gaussian_groups(n_group_a: int = 600, n_group_b: int = 1000, n_features: int = 10,
                             separation: float = 1.0, random_state=42) -> pd.DataFrame:
    """Two spherical Gaussians in ``n_features`` dimensions.

    GroupA is centred at the origin, GroupB at ``separation / sqrt(n_features)``
    on every axis, so the distance between the means is ``separation``
    regardless of dimension. Rows are GroupA first, then GroupB.
    """
    rng = check_random_state(random_state)
    shift = separation / np.sqrt(n_features)
    X_a = rng.normal(0.0, 1.0, size=(n_group_a, n_features))
    X_b = rng.normal(shift, 1.0, size=(n_group_b, n_features))
    df = pd.DataFrame(np.vstack([X_a, X_b]), columns=[f'x{i}' for i in range(n_features)])
    df[LABEL_COL] = [GROUP_A] * n_group_a + [GROUP_B] * n_group_b
    return df


def load_pool_csv(path: Union[str, os.PathLike], label_col: str = LABEL_COL) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found at {path}")

    encodings = ['utf-8', 'latin1', 'cp1252']
    for encoding in encodings:
        try:
            df = pd.read_csv(path, encoding=encoding)
        except UnicodeDecodeError:
            continue
        if label_col not in df.columns:
            raise ValueError(f"Expected a '{label_col}' label column in {path}.")
        print(f"Loaded {len(df)} rows from {path} ({encoding})")
        return df

    raise ValueError(f"Could not read {path} with any of the attempted encodings: {', '.join(encodings)}")


@dataclass(frozen=True, eq=False)
class SamplePool:
    """Labeled rows plus the positional index of each group, in pool order."""
    frame: pd.DataFrame
    label_col: str
    group_a_label: object
    group_b_label: object
    group_a_indices: np.ndarray
    group_b_indices: np.ndarray

    @classmethod
    def from_frame(cls, df: pd.DataFrame, label_col: str = LABEL_COL,
                   group_a_label=GROUP_A, group_b_label=GROUP_B) -> 'SamplePool':
        frame = preprocess_df(df, label_col, (group_a_label, group_b_label))
        labels = frame[label_col].to_numpy()
        a_idx = np.flatnonzero(labels == group_a_label)
        b_idx = np.flatnonzero(labels == group_b_label)
        a_idx.setflags(write=False)
        b_idx.setflags(write=False)
        return cls(frame, label_col, group_a_label, group_b_label, a_idx, b_idx)

    @property
    def feature_columns(self) -> List[str]:
        return [c for c in self.frame.columns if c != self.label_col]

    def rows(self, indices) -> pd.DataFrame:
        return self.frame.iloc[np.asarray(indices, dtype=int)]

    def __len__(self):
        return len(self.frame)

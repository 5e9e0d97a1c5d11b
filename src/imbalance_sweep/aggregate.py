from __future__ import annotations
from dataclasses import asdict, dataclass, fields
from typing import Iterator, List

import pandas as pd

from .evaluate import CELL_COLUMNS, metrics_from_cells


@dataclass(frozen=True)
class TrialResult:
    outer_trial: int
    idx: int
    group_a_train_n: int
    group_b_train_n: int
    group_a_test_n: int
    group_b_test_n: int
    a_as_a: int
    a_as_b: int
    b_as_a: int
    b_as_b: int
    auc: float
    synthetic_added: int
    test_truncated: bool = False
    insufficient_synthetic: bool = False
    degenerate_training_set: bool = False
    undefined_auc: bool = False

    @property
    def cells(self):
        return (self.a_as_a, self.a_as_b, self.b_as_a, self.b_as_b)

    @property
    def test_n(self) -> int:
        return self.group_a_test_n + self.group_b_test_n


RAW_COLUMNS = [f.name for f in fields(TrialResult)]
CONDITION_COLUMNS = ['test_truncated', 'insufficient_synthetic', 'degenerate_training_set', 'undefined_auc']
MEAN_COLUMNS = ['idx', 'group_b_train_n', 'group_a_test_n', 'group_b_test_n',
                *CELL_COLUMNS, 'auc', 'synthetic_added']
KEY_COLUMN = 'group_a_train_n'
SUMMARY_COLUMNS = [KEY_COLUMN, *MEAN_COLUMNS, 'n_trials', *[f'n_{c}' for c in CONDITION_COLUMNS],
                   'percent_group_a_of_total', 'percent_group_a_correct', 'percent_group_b_correct',
                   'precision', 'recall', 'f1']


class ResultsTable:
    """Append-only collection of trial results."""

    def __init__(self):
        self._records: List[TrialResult] = []

    def append(self, record: TrialResult):
        if not isinstance(record, TrialResult):
            raise TypeError(f"Expected TrialResult, got {type(record).__name__}")
        self._records.append(record)

    def __len__(self):
        return len(self._records)

    def __iter__(self) -> Iterator[TrialResult]:
        return iter(tuple(self._records))

    def to_frame(self) -> pd.DataFrame:
        """Raw table, one row per trial, ordered by (outer_trial, idx)."""
        df = pd.DataFrame([asdict(r) for r in self._records], columns=RAW_COLUMNS)
        return df.sort_values(['outer_trial', 'idx'], kind='mergesort').reset_index(drop=True)


def summarize(raw: pd.DataFrame) -> pd.DataFrame:
    """One row per realized GroupA training count.

    Numeric fields are averaged across outer trials (NaN AUCs are left out of
    the mean). Correct-classification percentages and precision/recall/F1 are
    derived from the averaged confusion cells.
    """
    if raw.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    raw = raw.sort_values(['outer_trial', 'idx'], kind='mergesort')
    grouped = raw.groupby(KEY_COLUMN, sort=False)

    summary = grouped[MEAN_COLUMNS].mean()
    summary['n_trials'] = grouped.size()
    for cond in CONDITION_COLUMNS:
        summary[f'n_{cond}'] = grouped[cond].sum().astype(int)
    summary = summary.reset_index()

    a_total = summary[KEY_COLUMN] + summary['group_a_test_n']
    total = a_total + summary['group_b_train_n'] + summary['group_b_test_n']
    summary['percent_group_a_of_total'] = 100.0 * a_total / total

    derived = pd.DataFrame(
        [metrics_from_cells(*cells) for cells in summary[list(CELL_COLUMNS)].itertuples(index=False)],
        index=summary.index,
    )
    summary = pd.concat([summary, derived], axis=1)
    return summary.sort_values('idx', kind='mergesort').reset_index(drop=True)[SUMMARY_COLUMNS]

from __future__ import annotations
from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend to avoid tkinter errors
import matplotlib.pyplot as plt
from sklearn.metrics import roc_auc_score

from .errors import UndefinedAUC

CELL_COLUMNS = ('a_as_a', 'a_as_b', 'b_as_a', 'b_as_b')


def ensure_dir(path: str | Path):
    Path(path).mkdir(parents=True, exist_ok=True)


def confusion_cells(y_true, y_pred, group_a_label, group_b_label) -> dict:
    """Counts of (actual, predicted) pairs over {A, B}, keyed ``<actual>_as_<predicted>``.

    Pairs that never occur are filled with 0.
    """
    labels = [group_a_label, group_b_label]
    if len(y_true) == 0:
        return dict.fromkeys(CELL_COLUMNS, 0)
    actual = pd.Series(np.asarray(y_true, dtype=object), name='actual')
    predicted = pd.Series(np.asarray(y_pred, dtype=object), name='predicted')
    table = pd.crosstab(actual, predicted).reindex(index=labels, columns=labels, fill_value=0)
    return {
        'a_as_a': int(table.at[group_a_label, group_a_label]),
        'a_as_b': int(table.at[group_a_label, group_b_label]),
        'b_as_a': int(table.at[group_b_label, group_a_label]),
        'b_as_b': int(table.at[group_b_label, group_b_label]),
    }


def compute_auc(y_true_positive, scores) -> float:
    """Rank-based ROC AUC; raises UndefinedAUC unless both classes are present."""
    y = np.asarray(y_true_positive).astype(int)
    if len(np.unique(y)) < 2:
        raise UndefinedAUC(f"AUC needs both classes, test labels contain {np.unique(y).tolist()}")
    return float(roc_auc_score(y, scores))


def _ratio(num, den) -> float:
    return float(num) / float(den) if den else float('nan')


def metrics_from_cells(a_as_a, a_as_b, b_as_a, b_as_b) -> dict:
    """Per-group correct percentages and GroupB precision/recall/F1 from (possibly averaged) cells."""
    precision = _ratio(b_as_b, b_as_b + a_as_b)
    recall = _ratio(b_as_b, b_as_b + b_as_a)
    f1 = _ratio(2 * b_as_b, 2 * b_as_b + a_as_b + b_as_a)
    return {
        'percent_group_a_correct': 100.0 * _ratio(a_as_a, a_as_a + a_as_b),
        'percent_group_b_correct': 100.0 * _ratio(b_as_b, b_as_a + b_as_b),
        'precision': precision,
        'recall': recall,
        'f1': f1,
    }


def plot_sweep_curve(averaged: pd.DataFrame, out_dir='outputs', title='Imbalance sweep'):
    """AUC and per-group accuracy against GroupA's share of the data."""
    ensure_dir(Path(out_dir) / 'plots')
    x = averaged['percent_group_a_of_total']

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(13, 5))
    ax1.plot(x, averaged['auc'], marker='o', ms=3, label='AUC')
    ax1.set_xlabel('GroupA share of data (%)')
    ax1.set_ylabel('AUC')
    ax1.set_title('AUC')
    ax1.invert_xaxis()
    ax1.grid(True, ls='--', alpha=0.4)

    ax2.plot(x, averaged['percent_group_a_correct'], marker='o', ms=3, label='GroupA correct')
    ax2.plot(x, averaged['percent_group_b_correct'], marker='o', ms=3, label='GroupB correct')
    ax2.set_xlabel('GroupA share of data (%)')
    ax2.set_ylabel('Correctly classified (%)')
    ax2.set_title('Per-group accuracy')
    ax2.invert_xaxis()
    ax2.legend()
    ax2.grid(True, ls='--', alpha=0.4)

    fig.suptitle(title)
    path = Path(out_dir) / 'plots' / 'sweep_curve.png'
    fig.savefig(path, dpi=180, bbox_inches='tight')
    plt.close(fig)
    return path

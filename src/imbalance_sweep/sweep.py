"""Trial evaluation and the outer-trial x configuration sweep."""
from __future__ import annotations

import numpy as np
import pandas as pd
from sklearn.utils import check_random_state
from tqdm import tqdm

from .aggregate import CONDITION_COLUMNS, ResultsTable, TrialResult, summarize
from .augment import make_augmentation
from .errors import ColumnMismatch, DegenerateTrainingSet, UndefinedAUC
from .evaluate import compute_auc, confusion_cells
from .models import make_classifier
from .partition import draw_trial_split, plan_sweep


def trial_random_state(seed: int, outer_trial: int, idx: int) -> np.random.RandomState:
    """Independent stream for one trial, derived from (seed, outer_trial, idx)."""
    return np.random.RandomState(np.random.SeedSequence([seed, outer_trial, idx]).generate_state(4))


def align_columns(train_set: pd.DataFrame, test_set: pd.DataFrame) -> pd.DataFrame:
    """Reorder training columns to the test set's and drop any the test set lacks."""
    missing = [c for c in test_set.columns if c not in train_set.columns]
    if missing:
        raise ColumnMismatch(f"Training set is missing columns {missing}")
    return train_set[list(test_set.columns)]


def evaluate_trial(pool, plan, augmentation, classifier_factory, rng, outer_trial: int = 0) -> TrialResult:
    label_col = pool.label_col
    label_a, label_b = pool.group_a_label, pool.group_b_label

    split = draw_trial_split(pool, plan, rng)
    train_set = pool.rows(split.train_indices)
    test_set = pool.rows(split.test_indices)

    aug = augmentation.apply(train_set, label_col, label_a, label_b, plan, rng)
    train_set = align_columns(aug.train_set, test_set)
    if aug.replaced:
        group_a_train_n = int((train_set[label_col] == label_a).sum())
        group_b_train_n = int((train_set[label_col] == label_b).sum())
    else:
        group_a_train_n = len(split.group_a.train)
        group_b_train_n = len(split.group_b.train)

    features = [c for c in test_set.columns if c != label_col]
    X_train, y_train = train_set[features], (train_set[label_col] == label_b).astype(int)
    X_test, y_test = test_set[features], (test_set[label_col] == label_b).astype(int)

    degenerate = False
    scores = np.empty(0)
    try:
        classifier = classifier_factory(rng).fit(X_train, y_train)
        if len(test_set):
            scores = classifier.positive_proba(X_test)
        predicted = np.where(scores > classifier.threshold, label_b, label_a)
    except DegenerateTrainingSet:
        # Without a fitted model every test row gets the only class seen in training
        degenerate = True
        observed = train_set[label_col].unique()
        fallback = observed[0] if len(observed) else label_b
        predicted = np.full(len(test_set), fallback, dtype=object)

    cells = confusion_cells(test_set[label_col], predicted, label_a, label_b)

    undefined_auc = False
    auc = float('nan')
    if not degenerate:
        try:
            auc = compute_auc(y_test, scores)
        except UndefinedAUC:
            undefined_auc = True

    return TrialResult(
        outer_trial=outer_trial,
        idx=plan.idx,
        group_a_train_n=group_a_train_n,
        group_b_train_n=group_b_train_n,
        group_a_test_n=len(split.group_a.test),
        group_b_test_n=len(split.group_b.test),
        auc=auc,
        synthetic_added=aug.synthetic_added,
        test_truncated=split.test_truncated,
        insufficient_synthetic=aug.insufficient,
        degenerate_training_set=degenerate,
        undefined_auc=undefined_auc,
        **cells,
    )


def run_sweep(pool, config, verbose: bool = True) -> ResultsTable:
    """Run every (outer_trial, configuration) pair in order.

    Raises ExhaustedPool before the first trial if any configuration cannot be
    drawn from the pool.
    """
    plans = plan_sweep(config, pool)
    augmentation = make_augmentation(config.augmentation, **config.augmentation_params)
    run_rng = check_random_state(config.random_seed)

    def classifier_factory(rng):
        return make_classifier(config.classifier, random_state=rng, **config.classifier_params)

    results = ResultsTable()
    desc = f"{config.classifier}/{config.augmentation}"
    with tqdm(total=config.num_outer_trials * len(plans), desc=desc, disable=not verbose) as pbar:
        for outer_trial in range(config.num_outer_trials):
            for plan in plans:
                if config.seed_policy == 'trial':
                    rng = trial_random_state(config.random_seed, outer_trial, plan.idx)
                else:
                    rng = run_rng
                results.append(evaluate_trial(pool, plan, augmentation, classifier_factory, rng,
                                              outer_trial=outer_trial))
                pbar.update(1)

    if verbose:
        raw = results.to_frame()
        for cond in CONDITION_COLUMNS:
            n = int(raw[cond].sum())
            if n:
                print(f"   {n}/{len(raw)} trials flagged {cond}")
    return results


def run_experiment(pool, config, verbose: bool = True):
    """Run the sweep and return the (raw, averaged) tables."""
    raw = run_sweep(pool, config, verbose=verbose).to_frame()
    return raw, summarize(raw)

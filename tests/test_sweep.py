import math
from dataclasses import replace

import numpy as np
import pandas as pd
import pytest

from imbalance_sweep.augment import AugmentResult, Augmentation, NoAugmentation, make_augmentation
from imbalance_sweep.data import SamplePool, simulate_gaussian_groups
from imbalance_sweep.errors import ColumnMismatch, ExhaustedPool
from imbalance_sweep.models import make_classifier
from imbalance_sweep.partition import plan_partition
from imbalance_sweep.sweep import align_columns, evaluate_trial, run_experiment, run_sweep, trial_random_state


def logistic(rng):
    return make_classifier('logistic', random_state=rng)


class DropGroupA(Augmentation):
    def apply(self, train_set, label_col, minority_label, majority_label, plan, rng):
        return AugmentResult(train_set[train_set[label_col] != minority_label], 0, 0, replaced=True)


class DropFeature(Augmentation):
    def apply(self, train_set, label_col, minority_label, majority_label, plan, rng):
        return AugmentResult(train_set.drop(columns=['x0']), 0, 0)


def _pool(n_a, n_b, n_features=3):
    return SamplePool.from_frame(simulate_gaussian_groups(n_group_a=n_a, n_group_b=n_b, n_features=n_features,
                                                          separation=2.0, random_state=0))


def test_trial_cells_sum_to_realized_test_size(small_pool):
    plan = plan_partition(3, initial_pool_size=50, step=5, initial_test_size=10)
    result = evaluate_trial(small_pool, plan, NoAugmentation(), logistic, np.random.RandomState(1))
    assert result.idx == 3
    assert result.group_a_train_n == plan.group_a_train_target
    assert result.group_b_train_n == plan.group_b_train_target
    assert result.group_a_test_n == plan.group_a_test_target
    assert result.group_b_test_n == plan.group_b_test_target
    assert sum(result.cells) == result.test_n
    assert 0.5 < result.auc <= 1.0
    assert not (result.degenerate_training_set or result.undefined_auc or result.test_truncated)


def test_training_set_without_group_a_is_degenerate():
    # GroupA pool equals its train target and GroupB's window leaves 2 test rows,
    # so the test set holds only GroupB
    pool = _pool(8, 20)
    plan = plan_partition(1, initial_pool_size=10, step=0, initial_test_size=5, synthetic_multiplier=0)
    result = evaluate_trial(pool, plan, DropGroupA(), logistic, np.random.RandomState(2))
    assert result.degenerate_training_set
    assert result.group_a_train_n == 0
    assert result.cells == (0, 0, 0, result.group_b_test_n)
    assert result.group_b_test_n == 2
    assert math.isnan(result.auc)
    assert result.test_truncated


def test_single_class_test_set_gives_undefined_auc():
    # GroupB's window is fully used for training, so only GroupA is tested
    pool = _pool(40, 8)
    plan = plan_partition(1, initial_pool_size=10, step=0, initial_test_size=5, synthetic_multiplier=0)
    result = evaluate_trial(pool, plan, NoAugmentation(), logistic, np.random.RandomState(3))
    assert result.undefined_auc
    assert math.isnan(result.auc)
    assert result.group_b_test_n == 0
    assert sum(result.cells) == result.group_a_test_n == 5


def test_synthetic_marker_is_dropped_before_fitting(small_pool):
    plan = plan_partition(4, initial_pool_size=50, step=5, initial_test_size=10, synthetic_multiplier=8)
    result = evaluate_trial(small_pool, plan, make_augmentation('smote'), logistic, np.random.RandomState(4))
    assert result.synthetic_added == plan.synthetic_target
    assert result.group_a_train_n == plan.group_a_train_target
    assert not result.insufficient_synthetic


def test_missing_training_column_is_fatal(small_pool):
    plan = plan_partition(1, initial_pool_size=50, step=5, initial_test_size=10)
    with pytest.raises(ColumnMismatch):
        evaluate_trial(small_pool, plan, DropFeature(), logistic, np.random.RandomState(5))


def test_align_columns_reorders_and_drops_extras():
    train = pd.DataFrame({'b': [1], 'synthetic': [True], 'a': [2], 'group': ['A']})
    test = pd.DataFrame({'a': [3], 'b': [4], 'group': ['B']})
    assert list(align_columns(train, test).columns) == ['a', 'b', 'group']


def test_replace_both_records_synthetic_counts(small_pool, small_config):
    config = replace(small_config, augmentation='kernel-replace-both', synthetic_multiplier=0,
                     augmentation_params={'start_idx': 2}, num_outer_trials=1)
    raw = run_sweep(small_pool, config, verbose=False).to_frame()
    first, later = raw[raw['idx'] == 1].iloc[0], raw[raw['idx'] > 1]
    assert first['synthetic_added'] == 0
    assert (later['synthetic_added'] == later['group_a_train_n'] + later['group_b_train_n']).all()


def test_single_trial_sweep_is_reproducible(small_pool, small_config):
    config = replace(small_config, num_outer_trials=1, augmentation='kernel')
    first = run_sweep(small_pool, config, verbose=False).to_frame()
    second = run_sweep(small_pool, config, verbose=False).to_frame()
    pd.testing.assert_frame_equal(first, second)


def test_trial_seed_policy_reproduces_any_single_trial(small_pool, small_config):
    config = replace(small_config, seed_policy='trial', augmentation='smote')
    raw = run_sweep(small_pool, config, verbose=False).to_frame()

    plan = plan_partition(3, initial_pool_size=50, step=5, initial_test_size=10, synthetic_multiplier=8)
    alone = evaluate_trial(small_pool, plan, make_augmentation('smote'), logistic,
                           trial_random_state(config.random_seed, 1, 3), outer_trial=1)
    row = raw[(raw['outer_trial'] == 1) & (raw['idx'] == 3)].iloc[0]
    assert row['auc'] == alone.auc
    assert tuple(int(row[c]) for c in ('a_as_a', 'a_as_b', 'b_as_a', 'b_as_b')) == alone.cells


def test_run_level_seed_lets_outer_trials_diverge(small_pool, small_config):
    raw = run_sweep(small_pool, small_config, verbose=False).to_frame()
    t0 = raw[raw['outer_trial'] == 0].reset_index(drop=True)
    t1 = raw[raw['outer_trial'] == 1].reset_index(drop=True)
    assert not t0['auc'].equals(t1['auc'])


def test_exhausted_pool_aborts_before_any_trial(small_config):
    pool = _pool(30, 100)
    with pytest.raises(ExhaustedPool):
        run_sweep(pool, small_config, verbose=False)


@pytest.mark.parametrize('augmentation,multiplier', [
    ('none', 0), ('oversample', 0), ('smote', 8), ('kernel', 8),
])
def test_run_experiment_summarizes_per_configuration(small_pool, small_config, augmentation, multiplier):
    config = replace(small_config, augmentation=augmentation, synthetic_multiplier=multiplier)
    raw, averaged = run_experiment(small_pool, config, verbose=False)
    assert len(raw) == config.num_outer_trials * config.num_configs
    assert len(averaged) == config.num_configs
    assert (averaged['n_trials'] == config.num_outer_trials).all()
    assert averaged['percent_group_a_of_total'].is_monotonic_decreasing
    assert (raw[['a_as_a', 'a_as_b', 'b_as_a', 'b_as_b']].sum(axis=1)
            == raw['group_a_test_n'] + raw['group_b_test_n']).all()


def test_oversample_sweep_reports_balancing_rows(small_pool, small_config):
    config = replace(small_config, augmentation='oversample', synthetic_multiplier=0, num_outer_trials=1)
    raw = run_sweep(small_pool, config, verbose=False).to_frame()
    assert (raw['synthetic_added'] == raw['group_b_train_n'] - raw['group_a_train_n']).all()


def test_forest_sweep_runs(small_pool, small_config):
    config = replace(small_config, classifier='forest', classifier_params={'n_estimators': 10}, num_outer_trials=1)
    raw, averaged = run_experiment(small_pool, config, verbose=False)
    assert averaged['auc'].between(0, 1).all()

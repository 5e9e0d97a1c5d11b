"""Partition planning and index sampling for one sweep configuration.

A configuration ``idx`` (1-based) fixes how many GroupA and GroupB rows go
into training and test. GroupA's window shrinks by ``step`` per
configuration while GroupB's grows by the same amount; 80% of each window is
drawn for training and the test targets move by one row per configuration.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List

import numpy as np

from .errors import ExhaustedPool

TRAIN_NUMERATOR, TRAIN_DENOMINATOR = 4, 5  # 80% of the pool window


@dataclass(frozen=True)
class PartitionPlan:
    idx: int
    group_a_pool_window: int
    group_b_pool_window: int
    group_a_train_target: int
    group_b_train_target: int
    group_a_test_target: int
    group_b_test_target: int
    synthetic_target: int


@dataclass(frozen=True)
class GroupSplit:
    train: np.ndarray
    test: np.ndarray
    test_target: int

    @property
    def test_truncated(self) -> bool:
        return len(self.test) < self.test_target


@dataclass(frozen=True)
class TrialSplit:
    group_a: GroupSplit
    group_b: GroupSplit

    @property
    def train_indices(self) -> np.ndarray:
        return np.concatenate([self.group_a.train, self.group_b.train])

    @property
    def test_indices(self) -> np.ndarray:
        return np.concatenate([self.group_a.test, self.group_b.test])

    @property
    def test_truncated(self) -> bool:
        return self.group_a.test_truncated or self.group_b.test_truncated


def _train_target(window: int) -> int:
    return (window * TRAIN_NUMERATOR) // TRAIN_DENOMINATOR


def plan_partition(idx: int, initial_pool_size: int = 500, step: int = 5,
                   initial_test_size: int = 100, synthetic_multiplier: int = 8) -> PartitionPlan:
    if idx < 1:
        raise ExhaustedPool(f"Configuration index must be >= 1, got {idx}")
    shift = idx - 1
    a_window = initial_pool_size - shift * step
    b_window = initial_pool_size + shift * step
    plan = PartitionPlan(
        idx=idx,
        group_a_pool_window=a_window,
        group_b_pool_window=b_window,
        group_a_train_target=_train_target(a_window),
        group_b_train_target=_train_target(b_window),
        group_a_test_target=initial_test_size - shift,
        group_b_test_target=initial_test_size + shift,
        synthetic_target=synthetic_multiplier * shift,
    )
    targets = (plan.group_a_pool_window, plan.group_b_pool_window,
               plan.group_a_train_target, plan.group_b_train_target,
               plan.group_a_test_target, plan.group_b_test_target)
    if min(targets) <= 0:
        raise ExhaustedPool(f"Configuration {idx} exhausts the pool: {plan}")
    return plan


def available_pools(pool, plan: PartitionPlan):
    """GroupA draws from its whole pool, GroupB from a prefix of length group_b_pool_window."""
    return pool.group_a_indices, pool.group_b_indices[:plan.group_b_pool_window]


def plan_sweep(config, pool) -> List[PartitionPlan]:
    """Plan every configuration up front so an impossible sweep fails before any trial runs."""
    plans = []
    for idx in range(1, config.num_configs + 1):
        plan = plan_partition(
            idx,
            initial_pool_size=config.initial_pool_size,
            step=config.step_size,
            initial_test_size=config.initial_test_size,
            synthetic_multiplier=config.synthetic_multiplier,
        )
        a_pool, b_pool = available_pools(pool, plan)
        if plan.group_a_train_target > len(a_pool):
            raise ExhaustedPool(
                f"Configuration {idx} needs {plan.group_a_train_target} GroupA training rows, pool has {len(a_pool)}")
        if plan.group_b_train_target > len(b_pool):
            raise ExhaustedPool(
                f"Configuration {idx} needs {plan.group_b_train_target} GroupB training rows, pool has {len(b_pool)}")
        plans.append(plan)
    return plans


def draw_group_split(pool_indices: np.ndarray, train_target: int, test_target: int, rng) -> GroupSplit:
    """Draw train indices at random, then take test indices from the leftover in pool order.

    When fewer than ``test_target`` rows are left the test split is truncated
    to whatever remains.
    """
    pool_indices = np.asarray(pool_indices)
    if train_target > len(pool_indices):
        raise ExhaustedPool(f"Cannot draw {train_target} training rows from a pool of {len(pool_indices)}")
    train = rng.choice(pool_indices, size=train_target, replace=False)
    leftover = pool_indices[~np.isin(pool_indices, train)]
    test = leftover[:test_target]
    return GroupSplit(train=train, test=test, test_target=test_target)


def draw_trial_split(pool, plan: PartitionPlan, rng) -> TrialSplit:
    a_pool, b_pool = available_pools(pool, plan)
    group_a = draw_group_split(a_pool, plan.group_a_train_target, plan.group_a_test_target, rng)
    group_b = draw_group_split(b_pool, plan.group_b_train_target, plan.group_b_test_target, rng)
    return TrialSplit(group_a=group_a, group_b=group_b)

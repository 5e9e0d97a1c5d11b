import numpy as np
import pandas as pd
import pytest

from imbalance_sweep.config import SweepConfig
from imbalance_sweep.data import SamplePool, simulate_gaussian_groups


@pytest.fixture
def small_pool() -> SamplePool:
    df = simulate_gaussian_groups(n_group_a=60, n_group_b=100, n_features=4, separation=2.0, random_state=3)
    return SamplePool.from_frame(df)


@pytest.fixture
def small_config() -> SweepConfig:
    return SweepConfig(
        num_outer_trials=2,
        num_configs=4,
        initial_pool_size=50,
        step_size=5,
        initial_test_size=10,
        synthetic_multiplier=8,
        augmentation='none',
        classifier='logistic',
        random_seed=11,
    )


@pytest.fixture
def imbalanced_train_set() -> pd.DataFrame:
    rng = np.random.default_rng(5)
    n_a, n_b = 40, 60
    X = np.vstack([rng.normal(0.0, 1.0, size=(n_a, 3)), rng.normal(1.5, 1.0, size=(n_b, 3))])
    df = pd.DataFrame(X, columns=['x0', 'x1', 'x2'])
    df['group'] = ['A'] * n_a + ['B'] * n_b
    return df


@pytest.fixture
def rng():
    return np.random.RandomState(0)

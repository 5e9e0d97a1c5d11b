from dataclasses import asdict, dataclass, field
from typing import Dict


SEED_POLICIES = ('run', 'trial')


@dataclass(frozen=True)
class SweepConfig:
    num_outer_trials: int = 10
    num_configs: int = 80
    initial_pool_size: int = 500
    step_size: int = 5
    initial_test_size: int = 100
    synthetic_multiplier: int = 8
    augmentation: str = 'none'
    classifier: str = 'logistic'
    random_seed: int = 42
    # 'run': one stream for the whole sweep. 'trial': one stream per (outer_trial, idx).
    seed_policy: str = 'run'
    augmentation_params: Dict = field(default_factory=dict)
    classifier_params: Dict = field(default_factory=dict)

    def __post_init__(self):
        if self.num_outer_trials < 1:
            raise ValueError(f"num_outer_trials must be >= 1, got {self.num_outer_trials}")
        if self.num_configs < 1:
            raise ValueError(f"num_configs must be >= 1, got {self.num_configs}")
        if self.step_size < 0:
            raise ValueError(f"step_size must be >= 0, got {self.step_size}")
        if self.synthetic_multiplier < 0:
            raise ValueError(f"synthetic_multiplier must be >= 0, got {self.synthetic_multiplier}")
        if self.seed_policy not in SEED_POLICIES:
            raise ValueError(f"Unknown seed policy: {self.seed_policy}")

    def to_dict(self) -> Dict:
        return asdict(self)


# Oversampling balances from the realized deficit, so it runs with multiplier 0.
EXPERIMENTS = {
    'logistic_none': {
        'augmentation': 'none',
        'classifier': 'logistic',
        'synthetic_multiplier': 0,
    },
    'logistic_oversample': {
        'augmentation': 'oversample',
        'classifier': 'logistic',
        'synthetic_multiplier': 0,
    },
    'logistic_smote': {
        'augmentation': 'smote',
        'classifier': 'logistic',
        'synthetic_multiplier': 8,
        'augmentation_params': {'k_neighbors': 5},
    },
    'logistic_kernel': {
        'augmentation': 'kernel',
        'classifier': 'logistic',
        'synthetic_multiplier': 8,
        'augmentation_params': {'pool_size': 1000},
    },
    'logistic_kernel_both': {
        'augmentation': 'kernel-replace-both',
        'classifier': 'logistic',
        'synthetic_multiplier': 0,
        'augmentation_params': {'start_idx': 2},
    },
    'forest_none': {
        'augmentation': 'none',
        'classifier': 'forest',
        'synthetic_multiplier': 0,
    },
    'forest_oversample': {
        'augmentation': 'oversample',
        'classifier': 'forest',
        'synthetic_multiplier': 0,
    },
    'forest_smote': {
        'augmentation': 'smote',
        'classifier': 'forest',
        'synthetic_multiplier': 8,
        'augmentation_params': {'k_neighbors': 5},
    },
    'forest_kernel': {
        'augmentation': 'kernel',
        'classifier': 'forest',
        'synthetic_multiplier': 8,
        'augmentation_params': {'pool_size': 1000},
    },
    'xgboost_smote': {
        'augmentation': 'smote',
        'classifier': 'xgboost',
        'synthetic_multiplier': 8,
        'augmentation_params': {'k_neighbors': 5},
    },
}


def get_experiment(name: str) -> Dict:
    """Get the preset parameters for a named experiment"""
    if name not in EXPERIMENTS:
        raise ValueError(f"Unknown experiment: {name}")
    return dict(EXPERIMENTS[name])


def config_for_experiment(name: str, **overrides) -> SweepConfig:
    params = get_experiment(name)
    params.update({k: v for k, v in overrides.items() if v is not None})
    return SweepConfig(**params)

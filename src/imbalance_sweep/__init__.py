from .aggregate import ResultsTable, TrialResult, summarize
from .augment import make_augmentation
from .config import SweepConfig, config_for_experiment
from .data import SamplePool, simulate_gaussian_groups
from .errors import (
    ColumnMismatch,
    DegenerateTrainingSet,
    ExhaustedPool,
    InsufficientSyntheticRows,
    SweepError,
    UndefinedAUC,
)
from .models import make_classifier
from .partition import draw_trial_split, plan_partition, plan_sweep
from .sweep import evaluate_trial, run_experiment, run_sweep

__version__ = '0.1.0'

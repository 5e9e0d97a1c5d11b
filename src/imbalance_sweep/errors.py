"""Conditions raised by the imbalance sweep.

ExhaustedPool and ColumnMismatch abort a sweep. The other three are caught by
the trial evaluator and recorded as per-trial flags.
"""


class SweepError(Exception):
    pass


class ExhaustedPool(SweepError, ValueError):
    """A planned train/test size cannot be drawn from the available pool."""


class ColumnMismatch(SweepError, ValueError):
    """Training and test sets disagree on their feature columns."""


class InsufficientSyntheticRows(SweepError):
    """An augmenter produced fewer synthetic rows than requested."""

    def __init__(self, requested: int, delivered: int):
        super().__init__(f"requested {requested} synthetic rows, got {delivered}")
        self.requested = requested
        self.delivered = delivered


class DegenerateTrainingSet(SweepError):
    """The training labels contain fewer than two classes."""


class UndefinedAUC(SweepError):
    """AUC needs both classes in the test labels."""

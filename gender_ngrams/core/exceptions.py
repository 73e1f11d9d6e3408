"""Error taxonomy for the classification pipeline.

Every error is a ``ValueError`` so callers that already guard against bad
inputs keep working.
"""


class ClassificationError(ValueError):
    """Base class for all pipeline errors."""


class InputShapeError(ClassificationError):
    """Record, label or prediction sequences do not line up."""


class TrainingError(ClassificationError):
    """A training split cannot be used to fit a model."""


class TrainingShapeError(TrainingError, InputShapeError):
    """Training features and labels have different lengths."""


class DimensionMismatchError(ClassificationError):
    """Feature matrix width differs from the fitted vocabulary."""


class UndefinedMetricError(ClassificationError):
    """Precision or recall has a zero denominator."""


class NotFittedError(ClassificationError):
    """A model or vectorizer was used before it was fitted."""

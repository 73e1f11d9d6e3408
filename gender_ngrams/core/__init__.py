"""Core types, constants and errors shared across gender_ngrams."""

from .exceptions import (
    ClassificationError,
    InputShapeError,
    TrainingError,
    TrainingShapeError,
    DimensionMismatchError,
    UndefinedMetricError,
    NotFittedError,
)
from .records import Record, load_records

__all__ = [
    'ClassificationError',
    'InputShapeError',
    'TrainingError',
    'TrainingShapeError',
    'DimensionMismatchError',
    'UndefinedMetricError',
    'NotFittedError',
    'Record',
    'load_records',
]

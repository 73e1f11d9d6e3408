"""Confusion matrix and binary metrics for predicted vs. true labels."""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn import metrics

from gender_ngrams.core.constants import ZERO_DIVISION_POLICIES
from gender_ngrams.core.exceptions import InputShapeError, UndefinedMetricError


@dataclass(frozen=True, eq=False)
class ConfusionMatrix:
    """
    Square count table over a closed label set.

    ``counts[i, j]`` is the number of records predicted as ``labels[i]``
    whose true label is ``labels[j]``.
    """

    labels: Tuple[str, ...]
    counts: np.ndarray

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def cell(self, predicted: str, true: str) -> int:
        return int(self.counts[self.labels.index(predicted), self.labels.index(true)])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            self.counts,
            index=pd.Index(self.labels, name='predicted'),
            columns=pd.Index(self.labels, name='true'),
        )


@dataclass(frozen=True)
class EvaluationResult:
    """Metrics for one set of predictions; precision/recall/f1 may be NaN."""

    confusion: ConfusionMatrix
    positive_label: str
    precision: float
    recall: float
    f1: float
    accuracy: float

    @property
    def n_records(self) -> int:
        return self.confusion.total

    def to_dict(self) -> Dict:
        return {
            'labels': list(self.confusion.labels),
            'confusion_matrix': self.confusion.counts.tolist(),
            'positive_label': self.positive_label,
            'precision': self.precision,
            'recall': self.recall,
            'f1': self.f1,
            'accuracy': self.accuracy,
            'n_records': self.n_records,
        }


def confusion_matrix(
    predicted: Sequence[str],
    true: Sequence[str],
    labels: Optional[Sequence[str]] = None,
) -> ConfusionMatrix:
    """
    Cross-tabulate predicted against true labels.

    Args:
        predicted: Predicted labels
        true: True labels, same length and order as predicted
        labels: Closed label set in reporting order; defaults to the sorted
            union of both sequences

    Raises:
        InputShapeError: On unequal lengths, empty input, or a label outside
            ``labels``
    """
    predicted = [str(p) for p in predicted]
    true = [str(t) for t in true]

    if len(predicted) != len(true):
        raise InputShapeError(
            f"Got {len(predicted)} predictions for {len(true)} true labels"
        )
    if not true:
        raise InputShapeError("Cannot evaluate an empty label sequence")

    if labels is None:
        labels = sorted(set(predicted) | set(true))
    labels = tuple(str(label) for label in labels)

    unknown = sorted((set(predicted) | set(true)) - set(labels))
    if unknown:
        raise InputShapeError(f"Labels {unknown} are not in the label set {list(labels)}")

    # sklearn puts true labels on rows; transpose to predicted rows
    counts = metrics.confusion_matrix(true, predicted, labels=list(labels)).T.astype(np.int64)

    return ConfusionMatrix(labels=labels, counts=counts)


def _ratio(numerator: int, denominator: int, name: str, zero_division: str) -> float:
    if denominator == 0:
        if zero_division == "nan":
            return float("nan")
        raise UndefinedMetricError(f"{name} is undefined: zero denominator")
    return numerator / denominator


def evaluate(
    predicted: Sequence[str],
    true: Sequence[str],
    labels: Optional[Sequence[str]] = None,
    positive_label: Optional[str] = None,
    zero_division: str = "raise",
) -> EvaluationResult:
    """
    Score predictions against true labels.

    Precision and recall are computed for ``positive_label`` (default: the
    first label of the label order). When a denominator is zero (nothing
    predicted positive, or no true positives in the data) the metric is
    undefined: ``zero_division="raise"`` raises UndefinedMetricError,
    ``zero_division="nan"`` reports NaN.

    Examples:
        >>> result = evaluate(['F', 'F', 'M', 'M'], ['F', 'M', 'M', 'M'])
        >>> result.precision, result.recall, result.accuracy
        (0.5, 1.0, 0.75)
    """
    if zero_division not in ZERO_DIVISION_POLICIES:
        raise ValueError(f"Unknown zero_division policy: {zero_division}")

    confusion = confusion_matrix(predicted, true, labels=labels)

    if positive_label is None:
        positive_label = confusion.labels[0]
    positive_label = str(positive_label)
    if positive_label not in confusion.labels:
        raise ValueError(f"Positive label {positive_label!r} not in {list(confusion.labels)}")

    pos = confusion.labels.index(positive_label)
    tp = int(confusion.counts[pos, pos])
    fp = int(confusion.counts[pos, :].sum()) - tp
    fn = int(confusion.counts[:, pos].sum()) - tp

    precision = _ratio(tp, tp + fp, "Precision", zero_division)
    recall = _ratio(tp, tp + fn, "Recall", zero_division)

    if np.isnan(precision) or np.isnan(recall):
        f1 = float("nan")
    else:
        f1 = 2 * tp / (2 * tp + fp + fn)

    accuracy = float(np.trace(confusion.counts)) / confusion.total

    return EvaluationResult(
        confusion=confusion,
        positive_label=positive_label,
        precision=precision,
        recall=recall,
        f1=f1,
        accuracy=accuracy,
    )

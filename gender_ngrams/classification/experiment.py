"""High-level experiment runner: records in, metrics out."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple
import logging
import pickle

import pandas as pd

from gender_ngrams.core.constants import (
    CLASSIFIERS,
    DEFAULT_MIN_DOCUMENT_FREQUENCY,
    DEFAULT_NGRAM_RANGE,
    DEFAULT_SEED,
    DEFAULT_TRAIN_FRACTION,
    SPLIT_METHODS,
    TEST,
    TRAIN,
    VOCABULARY_SCOPES,
    ZERO_DIVISION_POLICIES,
)
from gender_ngrams.core.exceptions import InputShapeError
from gender_ngrams.core.records import Record, check_unique_ids
from .classifier import TextClassifier, make_classifier
from .evaluation import EvaluationResult, evaluate
from .splitter import SplitAssignment, split_records
from .vectorizer import FeatureMatrix, NgramVectorizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExperimentConfig:
    """
    Every knob of one classification run.

    ``vocabulary_scope`` selects where the n-gram vocabulary comes from:
    "corpus" builds and trims it on all records before splitting (so test
    names shape the columns), "train" builds and trims it on the training
    split only and aligns the test matrix to it.
    """

    ngram_range: Tuple[int, int] = DEFAULT_NGRAM_RANGE
    lowercase: bool = True
    min_document_frequency: int = DEFAULT_MIN_DOCUMENT_FREQUENCY
    train_fraction: float = DEFAULT_TRAIN_FRACTION
    seed: int = DEFAULT_SEED
    split_method: str = "independent"
    vocabulary_scope: str = "corpus"
    classifier: str = "naive_bayes"
    classifier_params: Dict = field(default_factory=dict)
    labels: Optional[Tuple[str, ...]] = None
    positive_label: Optional[str] = None
    zero_division: str = "raise"

    def __post_init__(self):
        if self.split_method not in SPLIT_METHODS:
            raise ValueError(f"Unknown split method: {self.split_method}")
        if self.vocabulary_scope not in VOCABULARY_SCOPES:
            raise ValueError(f"Unknown vocabulary scope: {self.vocabulary_scope}")
        if self.classifier not in CLASSIFIERS:
            raise ValueError(f"Unknown classifier: {self.classifier}")
        if self.zero_division not in ZERO_DIVISION_POLICIES:
            raise ValueError(f"Unknown zero_division policy: {self.zero_division}")
        if not 0 < self.train_fraction < 1:
            raise ValueError(f"train_fraction must be in (0, 1), got {self.train_fraction}")
        if self.min_document_frequency < 0:
            raise ValueError("min_document_frequency must be >= 0")


@dataclass(frozen=True)
class ExperimentResult:
    """Everything produced by one run, kept for inspection and pickling."""

    config: ExperimentConfig
    split: SplitAssignment
    train_matrix: FeatureMatrix
    test_matrix: FeatureMatrix
    classifier: TextClassifier
    predictions: pd.DataFrame
    evaluation: EvaluationResult

    @property
    def vocabulary(self) -> Tuple[str, ...]:
        return self.train_matrix.vocabulary


def build_features(
    records: Sequence[Record],
    split: SplitAssignment,
    config: ExperimentConfig,
) -> Tuple[FeatureMatrix, FeatureMatrix]:
    """
    Vectorize records into aligned train and test matrices.

    Returns:
        (train_matrix, test_matrix) sharing one vocabulary
    """
    vectorizer = NgramVectorizer(ngram_range=config.ngram_range, lowercase=config.lowercase)
    record_ids = [record.record_id for record in records]

    if config.vocabulary_scope == "corpus":
        matrix = vectorizer.fit_transform(records).trim(config.min_document_frequency)
        train_matrix = matrix.rows(split.mask_for(record_ids, TRAIN))
        test_matrix = matrix.rows(split.mask_for(record_ids, TEST))
    else:
        in_train = split.mask_for(record_ids, TRAIN)
        train_records = [r for r, flag in zip(records, in_train) if flag]
        test_records = [r for r, flag in zip(records, in_train) if not flag]

        train_matrix = vectorizer.fit_transform(train_records).trim(
            config.min_document_frequency
        )
        test_matrix = vectorizer.transform(test_records).align(train_matrix.vocabulary)

    logger.info(
        f"Features ({config.vocabulary_scope} vocabulary): {len(train_matrix.vocabulary)} "
        f"columns after trimming at document frequency {config.min_document_frequency}"
    )
    return train_matrix, test_matrix


def run_classification_experiment(
    records: Sequence[Record],
    config: Optional[ExperimentConfig] = None,
) -> ExperimentResult:
    """
    Run the complete pipeline on labelled records.

    Steps:
    1. Assign every record to train or test
    2. Build n-gram features (corpus- or train-scoped vocabulary)
    3. Fit the configured classifier on the training rows
    4. Predict the test rows
    5. Evaluate predictions

    Args:
        records: Labelled records (unique ids)
        config: Run configuration (defaults to ExperimentConfig())

    Returns:
        ExperimentResult

    Raises:
        InputShapeError: On empty input, duplicate ids, or an empty test
            split
        TrainingError: If the training split is empty, single-class, or
            left with no feature columns after trimming
        UndefinedMetricError: Under the "raise" policy, when precision or
            recall has no denominator

    Examples:
        >>> records = load_records('tests/fixtures/names.csv')
        >>> result = run_classification_experiment(records, ExperimentConfig(seed=1))
        >>> result.evaluation.accuracy
    """
    config = config or ExperimentConfig()
    records = list(records)
    if not records:
        raise InputShapeError("No records to classify")
    check_unique_ids(records)

    logger.info(f"Running {config.classifier} experiment on {len(records)} records")

    split = split_records(
        [record.record_id for record in records],
        train_fraction=config.train_fraction,
        seed=config.seed,
        method=config.split_method,
        labels=[record.label for record in records],
    )

    train_matrix, test_matrix = build_features(records, split, config)

    label_of = {record.record_id: record.label for record in records}
    train_labels = [label_of[rid] for rid in train_matrix.record_ids]
    test_labels = [label_of[rid] for rid in test_matrix.record_ids]

    classifier = make_classifier(config.classifier, **config.classifier_params)
    classifier.fit(train_matrix, train_labels)
    if not test_matrix.record_ids:
        raise InputShapeError(
            f"Test split is empty: all {len(records)} records went to training; "
            "lower train_fraction or add records"
        )
    predicted = classifier.predict(test_matrix)

    text_of = {record.record_id: record.text for record in records}
    predictions = pd.DataFrame({
        'record_id': list(test_matrix.record_ids),
        'text': [text_of[rid] for rid in test_matrix.record_ids],
        'true_label': test_labels,
        'predicted_label': [str(p) for p in predicted],
    })
    predictions['correct'] = predictions['true_label'] == predictions['predicted_label']

    labels = config.labels or sorted({record.label for record in records})
    evaluation = evaluate(
        predictions['predicted_label'].tolist(),
        test_labels,
        labels=labels,
        positive_label=config.positive_label,
        zero_division=config.zero_division,
    )
    logger.info(
        f"Accuracy {evaluation.accuracy:.4f} on {evaluation.n_records} test records"
    )

    return ExperimentResult(
        config=config,
        split=split,
        train_matrix=train_matrix,
        test_matrix=test_matrix,
        classifier=classifier,
        predictions=predictions,
        evaluation=evaluation,
    )


def save_classification_results(
    result: ExperimentResult,
    output_dir: str = "data/classifier_results",
    filename: Optional[str] = None,
) -> str:
    """
    Save an experiment result to a pickle file.

    Args:
        result: ExperimentResult from run_classification_experiment
        output_dir: Directory to save results (created if needed)
        filename: File name; defaults to "<classifier>_seed=<seed>.pkl"

    Returns:
        Path to saved pickle file
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    if filename is None:
        filename = f"{result.config.classifier}_seed={result.config.seed}.pkl"
    filepath = output_path / filename

    data = {
        'result': result,
        'metrics': result.evaluation.to_dict(),
        'feature_names': list(result.vocabulary),
        'config': result.config,
    }

    with open(filepath, 'wb') as f:
        pickle.dump(data, f, protocol=4)

    logger.info(f"Saved results to {filepath}")
    return str(filepath)


def load_classification_results(filepath: str) -> dict:
    """
    Load results written by save_classification_results.

    Returns:
        Dictionary with keys: result, metrics, feature_names, config
    """
    with open(filepath, 'rb') as f:
        return pickle.load(f)

"""Classification module for character n-gram name classification."""

from .vectorizer import FeatureMatrix, NgramVectorizer, extract_ngrams
from .splitter import SplitAssignment, split_records
from .classifier import (
    TextClassifier,
    NaiveBayesClassifier,
    PenalizedLogisticClassifier,
    make_classifier,
)
from .evaluation import ConfusionMatrix, EvaluationResult, confusion_matrix, evaluate
from .experiment import (
    ExperimentConfig,
    ExperimentResult,
    build_features,
    run_classification_experiment,
    save_classification_results,
    load_classification_results,
)

__all__ = [
    'FeatureMatrix',
    'NgramVectorizer',
    'extract_ngrams',
    'SplitAssignment',
    'split_records',
    'TextClassifier',
    'NaiveBayesClassifier',
    'PenalizedLogisticClassifier',
    'make_classifier',
    'ConfusionMatrix',
    'EvaluationResult',
    'confusion_matrix',
    'evaluate',
    'ExperimentConfig',
    'ExperimentResult',
    'build_features',
    'run_classification_experiment',
    'save_classification_results',
    'load_classification_results',
]

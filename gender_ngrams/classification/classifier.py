"""Classifier adapters: sklearn models behind a fixed fit/predict contract."""

from typing import Dict, Optional, Sequence
import logging

import numpy as np
from scipy import sparse
from sklearn.linear_model import LogisticRegression
from sklearn.naive_bayes import MultinomialNB

from gender_ngrams.core.exceptions import (
    DimensionMismatchError,
    NotFittedError,
    TrainingError,
    TrainingShapeError,
)
from .vectorizer import FeatureMatrix

logger = logging.getLogger(__name__)


def _as_matrix(features):
    """Return (matrix, vocabulary) for a FeatureMatrix, array or sparse matrix."""
    if isinstance(features, FeatureMatrix):
        return features.counts, features.vocabulary
    if sparse.issparse(features):
        return features.tocsr(), None
    matrix = np.asarray(features)
    if matrix.ndim != 2:
        raise DimensionMismatchError(f"Expected a 2-D feature matrix, got {matrix.ndim}-D")
    return matrix, None


class TextClassifier:
    """
    Base adapter wrapping a scikit-learn estimator.

    Subclasses provide the estimator via ``_make_estimator``. The adapter
    checks inputs at the fit/predict boundary so every model family fails
    the same way on bad data.

    Attributes:
        estimator: The wrapped sklearn estimator (fresh on every fit)
        classes_: Sorted class labels seen in training
        n_features_: Number of feature columns seen in training
        vocabulary_: Training vocabulary when fitted on a FeatureMatrix
    """

    name = "base"

    def __init__(self):
        self.estimator = None
        self.classes_ = None
        self.n_features_ = None
        self.vocabulary_ = None

    def _make_estimator(self):
        """Return a fresh, unfitted sklearn estimator. Subclasses must override."""
        raise NotImplementedError

    def fit(self, train_features, train_labels: Sequence[str]) -> 'TextClassifier':
        """
        Train on a feature matrix and aligned labels.

        Args:
            train_features: FeatureMatrix, sparse matrix or 2-D array
            train_labels: One label per row

        Returns:
            self

        Raises:
            TrainingShapeError: If row count and label count differ
            TrainingError: If the split is empty, has fewer than 2 classes,
                or has no feature columns
        """
        X, vocabulary = _as_matrix(train_features)
        y = np.asarray(list(train_labels))

        if X.shape[0] != len(y):
            raise TrainingShapeError(
                f"Training matrix has {X.shape[0]} rows but {len(y)} labels"
            )
        if len(y) == 0:
            raise TrainingError("Training split is empty")

        classes = np.unique(y)
        if len(classes) < 2:
            raise TrainingError(
                f"Training labels need at least 2 distinct classes, got {classes.tolist()}"
            )
        if X.shape[1] == 0:
            raise TrainingError(
                "No feature columns left to train on; lower the minimum document "
                "frequency or add records"
            )

        self.estimator = self._make_estimator()
        self.estimator.fit(X, y)
        self.classes_ = self.estimator.classes_
        self.n_features_ = X.shape[1]
        self.vocabulary_ = vocabulary

        logger.info(
            f"Fitted {self.name} on {X.shape[0]} rows x {X.shape[1]} features, "
            f"classes {self.classes_.tolist()}"
        )
        return self

    def predict(self, features) -> np.ndarray:
        """
        Predict a label for each row.

        Raises:
            NotFittedError: If called before fit
            DimensionMismatchError: If the column count (or, for
                FeatureMatrix input, the vocabulary) differs from training
        """
        if self.estimator is None:
            raise NotFittedError(f"{self.name} classifier must be fitted before predict")

        X, vocabulary = _as_matrix(features)
        if X.shape[1] != self.n_features_:
            raise DimensionMismatchError(
                f"Features have {X.shape[1]} columns, model was fitted on {self.n_features_}"
            )
        if (
            vocabulary is not None
            and self.vocabulary_ is not None
            and tuple(vocabulary) != tuple(self.vocabulary_)
        ):
            raise DimensionMismatchError(
                "Feature vocabulary differs from the training vocabulary; "
                "align the matrix to the trained vocabulary first"
            )

        if X.shape[0] == 0:
            return np.asarray([], dtype=self.classes_.dtype)

        return self.estimator.predict(X)

    def get_feature_weights(self, feature_names: Sequence[str]) -> Dict[str, Dict[str, float]]:
        """Map each class to its per-feature weights. Subclasses must override."""
        raise NotImplementedError


class NaiveBayesClassifier(TextClassifier):
    """
    Multinomial Naive Bayes over n-gram counts.

    Examples:
        >>> clf = NaiveBayesClassifier(alpha=1.0)
        >>> clf.fit(train_matrix, train_labels)
        >>> predictions = clf.predict(test_matrix)
    """

    name = "naive_bayes"

    def __init__(self, alpha: float = 1.0):
        """
        Args:
            alpha: Additive smoothing parameter (default: 1.0 for Laplace smoothing)
        """
        super().__init__()
        self.alpha = alpha

    def _make_estimator(self):
        return MultinomialNB(alpha=self.alpha)

    def get_feature_weights(self, feature_names: Sequence[str]) -> Dict[str, Dict[str, float]]:
        """
        P(n-gram | class) for each class, plus their mean under 'overall'.

        Raises:
            NotFittedError: If the classifier hasn't been fitted yet
        """
        if self.classes_ is None:
            raise NotFittedError("Classifier must be fitted before extracting weights")

        # feature_log_prob_[i, j] = log P(gram_j | class_i)
        feature_probs = np.exp(self.estimator.feature_log_prob_)

        weights = {
            str(label): dict(zip(feature_names, map(float, feature_probs[i])))
            for i, label in enumerate(self.classes_)
        }
        weights['overall'] = dict(zip(feature_names, map(float, feature_probs.mean(axis=0))))
        return weights


class PenalizedLogisticClassifier(TextClassifier):
    """
    Logistic regression with an elastic-net penalty.

    ``l1_ratio`` mixes the penalty: 0 is ridge, 1 is lasso. ``C`` is the
    inverse regularization strength.
    """

    name = "penalized_logistic"

    def __init__(
        self,
        l1_ratio: float = 0.0,
        C: float = 1.0,
        max_iter: int = 5000,
        random_state: Optional[int] = 42,
    ):
        super().__init__()
        if not 0.0 <= l1_ratio <= 1.0:
            raise ValueError(f"l1_ratio must be in [0, 1], got {l1_ratio}")
        self.l1_ratio = l1_ratio
        self.C = C
        self.max_iter = max_iter
        self.random_state = random_state

    def _make_estimator(self):
        return LogisticRegression(
            penalty="elasticnet",
            solver="saga",
            l1_ratio=self.l1_ratio,
            C=self.C,
            max_iter=self.max_iter,
            random_state=self.random_state,
        )

    def get_feature_weights(self, feature_names: Sequence[str]) -> Dict[str, Dict[str, float]]:
        """
        Coefficients per class, plus mean absolute coefficient under 'overall'.

        For two classes sklearn stores one coefficient row (for classes_[1]);
        the other class gets its negation.
        """
        if self.classes_ is None:
            raise NotFittedError("Classifier must be fitted before extracting weights")

        coef = self.estimator.coef_
        if coef.shape[0] == 1:
            coef = np.vstack([-coef[0], coef[0]])

        weights = {
            str(label): dict(zip(feature_names, map(float, coef[i])))
            for i, label in enumerate(self.classes_)
        }
        weights['overall'] = dict(zip(feature_names, map(float, np.abs(coef).mean(axis=0))))
        return weights


def make_classifier(name: str, **params) -> TextClassifier:
    """
    Build a classifier by name.

    Args:
        name: "naive_bayes", "ridge" or "lasso"
        **params: Passed to the classifier constructor

    Returns:
        Unfitted TextClassifier
    """
    if name == "naive_bayes":
        return NaiveBayesClassifier(**params)
    if name == "ridge":
        return PenalizedLogisticClassifier(l1_ratio=0.0, **params)
    if name == "lasso":
        return PenalizedLogisticClassifier(l1_ratio=1.0, **params)
    raise ValueError(f"Unknown classifier: {name}")

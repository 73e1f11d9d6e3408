"""Character n-gram vectorization of labelled records."""

from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Sequence, Tuple
import logging

import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer
from tqdm import tqdm

from gender_ngrams.core.constants import DEFAULT_NGRAM_RANGE
from gender_ngrams.core.exceptions import InputShapeError, NotFittedError
from gender_ngrams.core.records import Record, check_unique_ids

logger = logging.getLogger(__name__)


def extract_ngrams(text: str, min_n: int, max_n: int) -> List[str]:
    """
    List every n-gram of ``text`` for n in [min_n, max_n].

    Uses sklearn's character analyzer, so grams are ordered by length first,
    then by position. A text shorter than ``min_n`` yields an empty list.

    Examples:
        >>> extract_ngrams("ann", 1, 2)
        ['a', 'n', 'n', 'an', 'nn']
    """
    analyzer = CountVectorizer(
        analyzer="char", ngram_range=(min_n, max_n), lowercase=False
    ).build_analyzer()
    return analyzer(text)


@dataclass(frozen=True, eq=False)
class FeatureMatrix:
    """
    Record-by-n-gram count table.

    Attributes:
        record_ids: Row labels, in input record order
        vocabulary: Column labels (n-grams), in first-seen order
        counts: Sparse CSR matrix of shape (n_records, n_vocabulary)
    """

    record_ids: Tuple[Hashable, ...]
    vocabulary: Tuple[str, ...]
    counts: sparse.csr_matrix

    @property
    def shape(self) -> Tuple[int, int]:
        return self.counts.shape

    def document_frequency(self) -> np.ndarray:
        """Number of rows in which each vocabulary column is non-zero."""
        return np.asarray((self.counts > 0).sum(axis=0)).ravel()

    def trim(self, min_document_frequency: int) -> 'FeatureMatrix':
        """
        Drop columns that occur in fewer than ``min_document_frequency`` rows.

        Args:
            min_document_frequency: Minimum number of records a column must
                appear in to be kept; 0 keeps every column

        Returns:
            New FeatureMatrix with the surviving columns in their original order
        """
        if min_document_frequency < 0:
            raise ValueError(
                f"min_document_frequency must be >= 0, got {min_document_frequency}"
            )

        keep = np.flatnonzero(self.document_frequency() >= min_document_frequency)
        dropped = len(self.vocabulary) - len(keep)
        logger.debug(
            f"Trim at document frequency {min_document_frequency}: "
            f"kept {len(keep)} features, dropped {dropped}"
        )

        return FeatureMatrix(
            record_ids=self.record_ids,
            vocabulary=tuple(self.vocabulary[i] for i in keep),
            counts=self.counts[:, keep].tocsr(),
        )

    def align(self, vocabulary: Sequence[str]) -> 'FeatureMatrix':
        """
        Re-project onto another vocabulary.

        Columns absent from this matrix become zero columns; columns absent
        from ``vocabulary`` are dropped.
        """
        source_index = {token: i for i, token in enumerate(self.vocabulary)}
        pairs = [
            (source_index[token], j)
            for j, token in enumerate(vocabulary)
            if token in source_index
        ]
        src = [i for i, _ in pairs]
        dst = [j for _, j in pairs]
        projection = sparse.csr_matrix(
            (
                np.ones(len(pairs), dtype=self.counts.dtype),
                (np.asarray(src, dtype=np.int64), np.asarray(dst, dtype=np.int64)),
            ),
            shape=(len(self.vocabulary), len(vocabulary)),
        )

        return FeatureMatrix(
            record_ids=self.record_ids,
            vocabulary=tuple(vocabulary),
            counts=(self.counts @ projection).tocsr(),
        )

    def rows(self, mask: Sequence[bool]) -> 'FeatureMatrix':
        """Keep the rows where ``mask`` is true."""
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (len(self.record_ids),):
            raise InputShapeError(
                f"Row mask has length {mask.size}, matrix has {len(self.record_ids)} rows"
            )
        positions = np.flatnonzero(mask)
        return FeatureMatrix(
            record_ids=tuple(self.record_ids[i] for i in positions),
            vocabulary=self.vocabulary,
            counts=self.counts[positions].tocsr(),
        )

    def select(self, record_ids: Sequence[Hashable]) -> 'FeatureMatrix':
        """Keep the rows for ``record_ids``, in the given order."""
        row_index = {record_id: i for i, record_id in enumerate(self.record_ids)}
        missing = [record_id for record_id in record_ids if record_id not in row_index]
        if missing:
            raise InputShapeError(f"Unknown record ids: {missing[:10]}")
        positions = [row_index[record_id] for record_id in record_ids]
        return FeatureMatrix(
            record_ids=tuple(record_ids),
            vocabulary=self.vocabulary,
            counts=self.counts[positions].tocsr(),
        )

    def to_frame(self) -> pd.DataFrame:
        """Dense DataFrame view, indexed by record id."""
        return pd.DataFrame(
            self.counts.toarray(),
            index=list(self.record_ids),
            columns=list(self.vocabulary),
        )


class NgramVectorizer:
    """
    Character n-gram counter with a first-seen-order vocabulary.

    sklearn's CountVectorizer sorts its fitted vocabulary; here the column
    order is the order in which n-grams are first met while scanning the
    records, so the same record order always gives the same columns. The
    ordered vocabulary is then handed to a CountVectorizer for counting.

    Examples:
        >>> vectorizer = NgramVectorizer(ngram_range=(1, 1))
        >>> matrix = vectorizer.fit_transform(make_records([("anna", "F")]))
        >>> matrix.vocabulary
        ('a', 'n')
    """

    def __init__(
        self,
        ngram_range: Tuple[int, int] = DEFAULT_NGRAM_RANGE,
        lowercase: bool = True,
        progress: bool = False,
    ):
        min_n, max_n = ngram_range
        if min_n < 1 or min_n > max_n:
            raise ValueError(f"Invalid ngram_range {ngram_range}: need 1 <= min_n <= max_n")

        self.ngram_range = (min_n, max_n)
        self.lowercase = lowercase
        self.progress = progress
        self.vocabulary_: Optional[Dict[str, int]] = None
        self.count_vectorizer_: Optional[CountVectorizer] = None

    def _count_vectorizer(self, vocabulary=None) -> CountVectorizer:
        return CountVectorizer(
            analyzer="char",
            ngram_range=self.ngram_range,
            lowercase=self.lowercase,
            vocabulary=vocabulary,
        )

    def fit(self, records: Sequence[Record]) -> 'NgramVectorizer':
        """Build the vocabulary from all records."""
        analyzer = self._count_vectorizer().build_analyzer()

        vocabulary = {}
        for record in tqdm(records, desc="Building vocabulary", disable=not self.progress):
            for gram in analyzer(record.text):
                if gram not in vocabulary:
                    vocabulary[gram] = len(vocabulary)

        self.vocabulary_ = vocabulary
        # CountVectorizer rejects an empty vocabulary
        self.count_vectorizer_ = self._count_vectorizer(vocabulary) if vocabulary else None
        logger.info(
            f"Vocabulary of {len(vocabulary)} n-grams (n={self.ngram_range}) "
            f"from {len(records)} records"
        )
        return self

    def transform(self, records: Sequence[Record]) -> FeatureMatrix:
        """
        Count vocabulary n-grams in each record.

        N-grams that are not in the fitted vocabulary are ignored.

        Args:
            records: Records to vectorize (ids must be unique)

        Returns:
            FeatureMatrix with one row per record
        """
        if self.vocabulary_ is None:
            raise NotFittedError("Vectorizer must be fitted before transform")

        records = list(records)
        check_unique_ids(records)

        if self.count_vectorizer_ is None:
            counts = sparse.csr_matrix((len(records), 0), dtype=np.int64)
        else:
            texts = [record.text for record in records]
            counts = self.count_vectorizer_.transform(
                tqdm(texts, desc="Counting n-grams", disable=not self.progress)
            ).tocsr()

        return FeatureMatrix(
            record_ids=tuple(record.record_id for record in records),
            vocabulary=self.get_feature_names_out(),
            counts=counts,
        )

    def fit_transform(self, records: Sequence[Record]) -> FeatureMatrix:
        return self.fit(records).transform(records)

    def get_feature_names_out(self) -> Tuple[str, ...]:
        if self.vocabulary_ is None:
            raise NotFittedError("Vectorizer must be fitted first")
        # dicts keep insertion order, which is the column order
        return tuple(self.vocabulary_)

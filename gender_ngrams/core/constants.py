"""Shared defaults for the name classification pipeline."""

# Closed label set used by the bundled names data
LABELS = ["F", "M"]

# Default column names in the names CSV
TEXT_COLUMN = "name"
LABEL_COLUMN = "gender"

# Feature extraction defaults (single characters up to trigrams)
DEFAULT_NGRAM_RANGE = (1, 3)
DEFAULT_MIN_DOCUMENT_FREQUENCY = 5

# Split defaults
DEFAULT_TRAIN_FRACTION = 0.7
DEFAULT_SEED = 42
SPLIT_METHODS = ("independent", "exact", "stratified")
TRAIN, TEST = "train", "test"

# Vocabulary built on the whole corpus or on the training split only
VOCABULARY_SCOPES = ("corpus", "train")

CLASSIFIERS = ("naive_bayes", "ridge", "lasso")

ZERO_DIVISION_POLICIES = ("raise", "nan")

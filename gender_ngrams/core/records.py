"""Record type and loading of labelled names from delimited files."""

from dataclasses import dataclass
from pathlib import Path
from typing import Hashable, Iterable, List, Optional, Tuple
import logging

import pandas as pd

from .constants import TEXT_COLUMN, LABEL_COLUMN
from .exceptions import InputShapeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Record:
    """One labelled text value (e.g. a first name and its gender)."""

    record_id: Hashable
    text: str
    label: str


def make_records(pairs: Iterable[Tuple[str, str]]) -> List[Record]:
    """
    Build records from ``(text, label)`` pairs, numbering ids from 0.

    Examples:
        >>> make_records([("anna", "F"), ("john", "M")])[1]
        Record(record_id=1, text='john', label='M')
    """
    return [Record(i, text, label) for i, (text, label) in enumerate(pairs)]


def check_unique_ids(records: List[Record]) -> None:
    """Raise InputShapeError if two records share an identifier."""
    seen = set()
    for record in records:
        if record.record_id in seen:
            raise InputShapeError(f"Duplicate record id: {record.record_id!r}")
        seen.add(record.record_id)


def load_records(
    csv_path,
    text_column: str = TEXT_COLUMN,
    label_column: str = LABEL_COLUMN,
    id_column: Optional[str] = None,
    sep: str = ",",
) -> List[Record]:
    """
    Load labelled records from a delimited file.

    Args:
        csv_path: Path to the delimited file
        text_column: Column holding the text to classify (default: "name")
        label_column: Column holding the class label (default: "gender")
        id_column: Column holding record identifiers; row positions are used
            when omitted
        sep: Field delimiter

    Returns:
        List of Record objects in file order

    Raises:
        FileNotFoundError: If csv_path does not exist
        ValueError: If a required column is missing
        InputShapeError: On empty text/label cells or duplicate ids

    Examples:
        >>> records = load_records('tests/fixtures/names.csv')
        >>> records[0].label in {'F', 'M'}
        True
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Records file not found: {csv_path}")

    df = pd.read_csv(csv_path, sep=sep, dtype=str, keep_default_na=False)

    required_cols = [text_column, label_column] + ([id_column] if id_column else [])
    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns: {missing_cols}")

    texts = df[text_column].str.strip()
    labels = df[label_column].str.strip()

    empty_rows = df.index[(texts == "") | (labels == "")].tolist()
    if empty_rows:
        raise InputShapeError(f"Empty text or label in rows: {empty_rows[:10]}")

    ids = df[id_column].tolist() if id_column else list(range(len(df)))

    records = [
        Record(record_id, text, label)
        for record_id, text, label in zip(ids, texts, labels)
    ]
    check_unique_ids(records)

    logger.info(
        f"Loaded {len(records)} records with labels {sorted(labels.unique())} from {csv_path}"
    )
    return records

#!/usr/bin/env python
"""
Pytest configuration and shared fixtures.

Fixtures load the real names file in tests/fixtures/. NO MOCKS - every test
runs the actual pipeline code.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from gender_ngrams.core.records import load_records, make_records


FIXTURE_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def names_csv():
    """Path to the bundled labelled names file (40 F, 40 M)."""
    return FIXTURE_DIR / "names.csv"


@pytest.fixture(scope="session")
def name_records(names_csv):
    """All records from the names file."""
    return load_records(names_csv)


@pytest.fixture
def scenario_records():
    """Four-name corpus used in the worked examples."""
    return make_records([("anna", "F"), ("john", "M"), ("mary", "F"), ("mark", "M")])

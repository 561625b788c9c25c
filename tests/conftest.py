"""Shared fixtures for the contention test suite."""

from pathlib import Path

import pytest

from src.contention_engine.contenders import ContentionCalculator
from src.pool_data.cleaning import PickCleaner
from src.pool_data.ingestion import PageDataIngester
from src.pool_data.transformation import ContentionInputBuilder

DATA_DIR = Path(__file__).parent / "data"
PAGE_DATA_FILE = DATA_DIR / "page_data_week5.json"


# ------------------------------------------------------------------
# Lightweight factories: cheap to construct, no I/O
# ------------------------------------------------------------------

@pytest.fixture(scope="module")
def calculator():
    return ContentionCalculator()


@pytest.fixture(scope="module")
def strict_calculator():
    return ContentionCalculator(allow_ties=False)


@pytest.fixture(scope="module")
def cleaner():
    return PickCleaner()


@pytest.fixture(scope="module")
def builder():
    return ContentionInputBuilder()


# ------------------------------------------------------------------
# Sample-week fixtures: read tests/data/page_data_week5.json
# ------------------------------------------------------------------

@pytest.fixture(scope="module")
def ingester():
    """Ingester pointing at the sample week 5 page data."""
    return PageDataIngester(PAGE_DATA_FILE)


@pytest.fixture(scope="module")
def raw_data(ingester):
    return ingester.read_all()


@pytest.fixture(scope="module")
def cleaned_data(cleaner, raw_data):
    return cleaner.clean_all(raw_data)


@pytest.fixture(scope="module")
def contention_inputs(builder, cleaned_data):
    """Engine inputs built from the sample week."""
    return builder.transform(cleaned_data)

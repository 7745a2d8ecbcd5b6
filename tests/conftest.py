import pytest

from shelf.catalog import parse_catalog

from .samples import SAMPLE_FEED


@pytest.fixture
def sample_feed() -> str:
    return SAMPLE_FEED


@pytest.fixture
def catalog():
    return parse_catalog(SAMPLE_FEED, source="sample.csv")

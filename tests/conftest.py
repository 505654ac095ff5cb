import os
from pathlib import Path

import pytest

# Test directory -> marker applied to every test collected under it
_MARKERS_BY_DIR = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "bdd": pytest.mark.bdd,
    "integration": pytest.mark.integration,
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="PROTEAN_ENV overlay to run the reviews domain with (e.g. test, sqlite)",
    )


def pytest_sessionstart(session):
    """Initialize the reviews domain once and make it the current domain."""
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from reviews.domain import reviews

    reviews.init()
    reviews.domain_context().push()


def pytest_collection_modifyitems(config, items):
    for item in items:
        parts = Path(item.fspath).parts
        for directory, marker in _MARKERS_BY_DIR.items():
            if directory in parts:
                item.add_marker(marker)
                break

        if "integration" in parts and item.get_closest_marker("fast") is None:
            item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db():
    """Create SQL tables when running against a SQL overlay; no-op on memory."""
    from reviews.domain import reviews
    from reviews.utils.db import drop_db, setup_db

    setup_db(reviews)
    yield
    drop_db(reviews)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Wipe stores, reviews and recorded events after every test."""
    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()

import pytest
from protean.integrations.pytest import DomainFixture
from reviews.config import reset_moderation_policy
from reviews.ports import get_notifier, get_purchase_verifier, reset_ports


@pytest.fixture(scope="session")
def reviews_bed():
    from reviews.domain import reviews

    bed = DomainFixture(reviews)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(reviews_bed):
    with reviews_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _reset_collaborators():
    reset_ports()
    reset_moderation_policy()
    yield
    reset_ports()
    reset_moderation_policy()


@pytest.fixture()
def purchases():
    """The fake purchase verifier used by the handlers in this test."""
    return get_purchase_verifier()


@pytest.fixture()
def notifier():
    """The fake notifier used by the event handlers in this test."""
    return get_notifier()

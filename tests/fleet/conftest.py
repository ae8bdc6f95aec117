import pytest
from builders import SALES

from fleet.identity import get_identity_provider
from fleet.store import get_store


@pytest.fixture
def store():
    return get_store()


@pytest.fixture
def identity():
    return get_identity_provider()


@pytest.fixture
def sales_user(identity):
    identity.login(SALES)
    return SALES

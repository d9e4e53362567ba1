"""
Pytest configuration and shared fixtures for all tests.
"""
import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.authentication.services import auth_service
from tests.factories import (
    AdminFactory,
    MasterAdminFactory,
    RefereeUserFactory,
    TournamentFactory,
    UserFactory,
)


@pytest.fixture(autouse=True)
def clear_cache():
    """Rate limit windows live in the cache; start every test empty."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client():
    """Build an APIClient that sends a bearer token for the given user."""

    def _make(user):
        client = APIClient()
        token = auth_service.generate_tokens(user)['accessToken']
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        return client

    return _make


@pytest.fixture
def user(db):
    return UserFactory()


@pytest.fixture
def admin(db):
    return AdminFactory()


@pytest.fixture
def master_admin(db):
    return MasterAdminFactory()


@pytest.fixture
def referee_user(db):
    return RefereeUserFactory()


@pytest.fixture
def tournament(admin):
    return TournamentFactory(organizer=admin)

"""
Tests for the shared error envelope, JWT middleware, rate limiting and
permission helpers.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
import requests
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError
from rest_framework.test import APIClient

from apps.core.exceptions import convert_to_api_error
from apps.core.permissions import can_manage_tournament, is_admin, Role
from apps.core.utils.pagination import paginate
from tests.factories import AdminFactory


@pytest.mark.parametrize('exc,status,code', [
    (ValidationError('bad input'), 400, 'VALIDATION_ERROR'),
    (ObjectDoesNotExist('Match matching query does not exist.'), 404, 'NOT_FOUND'),
    (DatabaseError('disk full'), 500, 'DATABASE_ERROR'),
    (requests.ConnectionError('refused'), 503, 'NETWORK_ERROR'),
    (PermissionError(), 403, 'AUTHORIZATION_ERROR'),
    (ValueError('side must be 1 or 2'), 400, 'VALIDATION_ERROR'),
    (RuntimeError('boom'), 500, 'UNEXPECTED_ERROR'),
])
def test_convert_to_api_error(exc, status, code):
    error = convert_to_api_error(exc)
    assert (error.status_code, error.code) == (status, code)
    assert error.message


def test_database_errors_are_retryable():
    assert convert_to_api_error(DatabaseError()).to_dict()['error']['retryable'] is True


def test_paginate_caps_limit():
    items, meta = paginate(list(range(250)), page=2, limit=500)
    assert len(items) == 100
    assert items[0] == 100
    assert meta['totalPages'] == 3


def test_is_admin():
    assert is_admin(Role.TOURNAMENT_ADMIN)
    assert is_admin(Role.MASTER_ADMIN)
    assert not is_admin(Role.REFEREE)


@pytest.mark.django_db
class TestMiddleware:

    def test_health(self, api_client):
        response = api_client.get('/health')
        assert response.status_code == 200
        assert response.json()['services']['database'] == 'connected'

    def test_malformed_authorization_header(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION='Token abc')
        response = api_client.get('/api/fantasy/teams')
        assert response.status_code == 401
        assert response.json()['error']['code'] == 'INVALID_TOKEN_FORMAT'

    def test_expired_token(self, settings, api_client, user):
        token = jwt.encode({
            'userId': str(user.id),
            'role': user.role,
            'exp': datetime.now(timezone.utc) - timedelta(minutes=1),
        }, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = api_client.get('/api/fantasy/teams')
        assert response.status_code == 403
        assert response.json()['error']['code'] == 'TOKEN_EXPIRED'

    def test_anonymous_request_to_protected_view(self, api_client):
        response = api_client.get('/api/fantasy/teams')
        assert response.status_code == 401
        assert response.json()['error'] == {
            'code': 'AUTHENTICATION_ERROR',
            'message': 'Authentication required',
            'details': {},
            'retryable': False,
        }

    def test_rate_limit_headers(self, auth_client, user):
        response = auth_client(user).get('/api/fantasy/teams')
        assert response.status_code == 200
        assert response['X-RateLimit-Limit'] == '10000'
        assert response['X-RateLimit-Remaining'] == '9999'

    def test_payment_limit_does_not_spend_general_budget(self, settings, auth_client, user):
        settings.RATE_LIMIT_MAX_REQUESTS = 5
        settings.RATE_LIMIT_STRICT_MAX_REQUESTS = 1
        client = auth_client(user)

        client.post('/api/payments/create-order', {'contestId': 999999}, format='json')
        blocked = client.post('/api/payments/create-order', {'contestId': 999999}, format='json')
        assert blocked.status_code == 429
        assert blocked.json()['error']['details']['limit'] == 1

        response = client.get('/api/fantasy/teams')
        assert response.status_code == 200
        assert response['X-RateLimit-Remaining'] == '3'

    def test_login_attempts_are_limited_per_ip(self, settings):
        settings.LOGIN_RATE_LIMIT_MAX = 2
        client = APIClient()
        payload = {'email': 'nobody@example.com', 'password': 'wrong-password'}

        for _ in range(2):
            assert client.post('/api/auth/login', payload, format='json').status_code == 401

        blocked = client.post('/api/auth/login', payload, format='json')
        assert blocked.status_code == 429
        assert blocked.json()['error']['code'] == 'RATE_LIMIT_EXCEEDED'
        assert int(blocked['Retry-After']) > 0


@pytest.mark.django_db
def test_can_manage_tournament(admin, master_admin, tournament):
    assert can_manage_tournament(admin, tournament)
    assert can_manage_tournament(master_admin, tournament)
    assert not can_manage_tournament(AdminFactory(), tournament)

"""
Shared fixtures for the payclient test suite
"""

import json
import pytest
from unittest.mock import Mock

from requests.structures import CaseInsensitiveDict

from payclient.config_loader import ClientConfig
from payclient.http_client import HTTPClient
from payclient.responses import HttpResponse


BASE_URL = 'https://api.example.com'


def item_payload(identity='ID123', string_field='foo', int_field=123):
    return {'id': identity, 'string_field': string_field, 'int_field': int_field}


def page_payload(items, after=None, before=None, limit=50):
    return {
        'items': items,
        'meta': {'cursors': {'before': before, 'after': after}, 'limit': limit}
    }


def error_payload(error_type, code, errors=None, message='Something went wrong'):
    return {
        'error': {
            'message': message,
            'documentation_url': f'https://developer.example.com/api-reference#{error_type}',
            'type': error_type,
            'request_id': 'REQ_0001',
            'code': code,
            'errors': errors or []
        }
    }


CONFLICT_ERROR = error_payload('invalid_state', 409, errors=[{
    'reason': 'idempotent_creation_conflict',
    'message': 'A resource has already been created with this idempotency key',
    'links': {'conflicting_resource_id': 'ID123'}
}], message='A resource has already been created with this idempotency key')

VALIDATION_ERROR = error_payload('validation_failed', 422, errors=[
    {
        'field': 'amount',
        'message': 'must be greater than 0',
        'reason': 'greater_than',
        'request_pointer': '/items/amount'
    },
    {
        'field': 'currency',
        'message': 'is not supported',
        'reason': 'invalid_currency',
        'request_pointer': '/items/currency'
    }
], message='Validation failed')

INTERNAL_ERROR = error_payload('gocardless', 500, message='Uh-oh!')


@pytest.fixture
def make_response():
    """Factory building HttpResponse objects from JSON-serialisable payloads"""
    def _make(status_code, payload=None, headers=None, body=None):
        if body is None:
            body = json.dumps(payload)
        return HttpResponse(
            status_code=status_code,
            body=body,
            headers=CaseInsensitiveDict(headers or {'Content-Type': 'application/json'})
        )
    return _make


@pytest.fixture
def config():
    return ClientConfig.from_access_token('token', base_url=BASE_URL, wait_seconds=0.0)


@pytest.fixture
def transport():
    return Mock(spec=['send', 'close'])


@pytest.fixture
def http_client(config, transport):
    return HTTPClient(config, transport=transport)

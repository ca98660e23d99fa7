"""
Integration Tests for the HTTP service (in-process aiohttp test server)
"""

import asyncio

import pytest
from aiohttp import test_utils

from domain_intel.server import create_app
from domain_intel.util.types import FetchSuccess, ServiceConfig

HTML = '<html><head><title>Acme Co | Home</title></head><body>info@acme.com</body></html>'


def _request(app, method, path, **kwargs):
    async def go():
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.request(method, path, **kwargs)
            body = await resp.json() if resp.content_type == 'application/json' else None
            return resp.status, body, resp.headers
    return asyncio.run(go())


@pytest.fixture
def fetcher(make_fetcher):
    return make_fetcher({
        f'https://site{i}.com': FetchSuccess(200, f'https://site{i}.com/', HTML) for i in range(10)
    })


@pytest.fixture
def app(fetcher):
    return create_app(ServiceConfig(bulk_max_domains=4, batch_scan_max_domains=2), fetcher=fetcher)


def test_index(app):
    status, body, _ = _request(app, 'GET', '/')
    assert status == 200
    assert body == {'status': 'ok'}


def test_bulk_analyze(app):
    status, body, headers = _request(app, 'POST', '/bulk-analyze',
                                     json={'domains': ['site1.com', 'https://Site2.com/', 'gone.com']})

    assert status == 200
    assert [r['domain'] for r in body] == ['site1.com', 'site2.com', 'gone.com']
    first = body[0]
    assert first['status'] == 'Active'
    assert first['statusCode'] == 200
    assert first['profile']['name'] == 'Acme Co'
    assert first['profile']['email'] == 'info@acme.com'
    assert set(first['social']) == {'facebook', 'instagram', 'linkedin', 'gmb'}
    assert body[2] == {
        'domain': 'gone.com', 'status': 'Inactive', 'statusCode': 0, 'reason': 'DNS Not Found',
        'profile': {'name': '', 'street': '', 'city': '', 'state': '', 'zip': '', 'phone': '', 'email': ''},
        'social': {'facebook': '', 'instagram': '', 'linkedin': '', 'gmb': ''},
    }
    assert headers['Access-Control-Allow-Origin'] == '*'


@pytest.mark.parametrize('path,cap', [('/bulk-analyze', 4), ('/batch-scan', 2)])
def test_request_is_capped(app, path, cap):
    domains = [f'site{i}.com' for i in range(8)]

    status, body, _ = _request(app, 'POST', path, json={'domains': domains})

    assert status == 200
    assert [r['domain'] for r in body] == domains[:cap]


@pytest.mark.parametrize('kwargs', [
    {'json': {}},
    {'json': {'domains': []}},
    {'json': {'domains': 'site1.com'}},
    {'json': ['site1.com']},
    {'data': 'not json', 'headers': {'Content-Type': 'application/json'}},
])
def test_domains_array_required(app, kwargs):
    status, body, _ = _request(app, 'POST', '/bulk-analyze', **kwargs)
    assert status == 400
    assert body == {'error': 'Domains array required'}


def test_preflight(app):
    status, _, headers = _request(app, 'OPTIONS', '/batch-scan')
    assert status == 204
    assert 'POST' in headers['Access-Control-Allow-Methods']

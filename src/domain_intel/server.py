"""HTTP service around the scan pipeline.

Endpoints:
    GET  /               liveness probe
    POST /bulk-analyze   {"domains": [...]} -> [ScanResult, ...]
    POST /batch-scan     same contract, smaller cap for progressive UIs

Batch caps live here, not in the pipeline: a request over the cap is
truncated and the response covers the first N domains.
"""

import logging
from typing import Optional

from aiohttp import web

from domain_intel.scanner.runner import BatchScanner
from domain_intel.util.types import ServiceConfig

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey('config', ServiceConfig)
FETCHER_KEY = web.AppKey('fetcher', object)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
}

DOMAINS_REQUIRED = {'error': 'Domains array required'}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Open CORS for browser front-ends, including preflight."""
    if request.method == 'OPTIONS':
        return web.Response(status=204, headers=CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


async def _read_domains(request: web.Request) -> Optional[list]:
    """The domains list from the body, or None if the body is unusable."""
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    domains = payload.get('domains')
    if not isinstance(domains, list) or not domains:
        return None
    return domains


async def _scan(request: web.Request, cap: int) -> web.Response:
    domains = await _read_domains(request)
    if domains is None:
        return web.json_response(DOMAINS_REQUIRED, status=400)

    if len(domains) > cap:
        logger.info(f"{request.path}: {len(domains)} domains requested, capped at {cap}")
        domains = domains[:cap]

    config = request.app[CONFIG_KEY]
    scanner = BatchScanner(config.scan, fetcher=request.app.get(FETCHER_KEY))
    results = await scanner.run(domains)
    return web.json_response([r.to_dict() for r in results])


async def index(request: web.Request) -> web.Response:
    return web.json_response({'status': 'ok'})


async def bulk_analyze(request: web.Request) -> web.Response:
    return await _scan(request, request.app[CONFIG_KEY].bulk_max_domains)


async def batch_scan(request: web.Request) -> web.Response:
    return await _scan(request, request.app[CONFIG_KEY].batch_scan_max_domains)


def create_app(config: Optional[ServiceConfig] = None, fetcher=None) -> web.Application:
    """Build the aiohttp application.

    `fetcher` replaces the real HTTP fetcher (tests use a fake one).
    """
    app = web.Application(middlewares=[cors_middleware])
    app[CONFIG_KEY] = config or ServiceConfig()
    if fetcher is not None:
        app[FETCHER_KEY] = fetcher
    app.router.add_get('/', index)
    app.router.add_post('/bulk-analyze', bulk_analyze)
    app.router.add_post('/batch-scan', batch_scan)
    return app


def run_server(config: ServiceConfig) -> None:
    """Serve until interrupted."""
    logger.info(f"Starting service on {config.host}:{config.port}")
    web.run_app(create_app(config), host=config.host, port=config.port, print=None)

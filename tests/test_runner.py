"""
Unit Tests for the per-domain pipeline and the batch scheduler
"""

import asyncio

import pytest

from domain_intel.scanner.runner import BatchScanner
from domain_intel.util.types import FetchFailure, FetchSuccess, ScanConfig, ScanStatus

LIVE_HTML = '<html><head><title>{name} | Home</title></head><body><a href="tel:555-010-0000">Call</a></body></html>'


def _page(url, body=None, status=200):
    return FetchSuccess(status_code=status, final_url=url + '/', body=body if body is not None else LIVE_HTML.format(name='Acme'))


def _run(scanner, domains, **kwargs):
    return asyncio.run(scanner.run(domains, **kwargs))


class TestBatchScanner:

    def test_empty_input(self, make_fetcher):
        assert _run(BatchScanner(fetcher=make_fetcher()), []) == []

    def test_live_domain(self, make_fetcher):
        fetcher = make_fetcher({'https://acme.com': _page('https://acme.com')})

        [result] = _run(BatchScanner(fetcher=fetcher), ['https://ACME.com/'])

        assert result.domain == 'acme.com'
        assert result.status is ScanStatus.ACTIVE
        assert result.status_code == 200
        assert result.reason == ''
        assert result.profile.name == 'Acme'
        assert result.profile.phone == '555-010-0000'
        assert fetcher.calls == ['https://acme.com']

    def test_results_keep_input_order(self, make_fetcher):
        domains = ['slow.com', 'fast.com', 'dead.com', 'mid.com']
        fetcher = make_fetcher(
            {f'https://{d}': _page(f'https://{d}', LIVE_HTML.format(name=d)) for d in ('slow.com', 'fast.com', 'mid.com')},
            delays={'slow.com': 0.05, 'mid.com': 0.02},
        )

        results = _run(BatchScanner(ScanConfig(concurrency=4), fetcher=fetcher), domains)

        assert [r.domain for r in results] == domains
        assert [r.status for r in results] == [
            ScanStatus.ACTIVE, ScanStatus.ACTIVE, ScanStatus.INACTIVE, ScanStatus.ACTIVE,
        ]

    def test_concurrency_is_bounded(self, make_fetcher):
        domains = [f'site{i}.com' for i in range(10)]
        fetcher = make_fetcher(
            {f'https://{d}': _page(f'https://{d}') for d in domains},
            delays={d: 0.02 for d in domains},
        )

        results = _run(BatchScanner(ScanConfig(concurrency=3), fetcher=fetcher), domains)

        assert len(results) == 10
        assert 1 <= fetcher.max_in_flight <= 3

    def test_slow_domains_do_not_block_or_reorder(self, make_fetcher):
        domains = [f'd{i}.com' for i in range(1, 11)]
        fetcher = make_fetcher(
            {f'https://{d}': _page(f'https://{d}') for d in domains},
            delays={'d1.com': 0.1, 'd2.com': 0.1, 'd3.com': 0.1},
        )

        results = _run(BatchScanner(ScanConfig(concurrency=3), fetcher=fetcher), domains)

        assert [r.domain for r in results] == domains
        assert fetcher.max_in_flight <= 3
        assert all(r.status is ScanStatus.ACTIVE for r in results)

    def test_unresolvable_host_is_not_retried_over_http(self, make_fetcher):
        fetcher = make_fetcher()

        [result] = _run(BatchScanner(fetcher=fetcher), ['nowhere.invalid'])

        assert result.status is ScanStatus.INACTIVE
        assert result.status_code == 0
        assert result.reason == 'DNS Not Found'
        assert fetcher.calls == ['https://nowhere.invalid', 'https://www.nowhere.invalid']

    def test_ssl_failure_falls_back_to_http(self, make_fetcher):
        fetcher = make_fetcher({
            'https://oldsite.com': FetchFailure('SSL Error'),
            'http://oldsite.com': _page('http://oldsite.com'),
        })

        [result] = _run(BatchScanner(fetcher=fetcher), ['oldsite.com'])

        assert result.status is ScanStatus.ACTIVE
        assert result.reason == ''
        assert fetcher.calls == ['https://oldsite.com', 'http://oldsite.com']

    def test_blank_page_tries_next_candidate(self, make_fetcher):
        fetcher = make_fetcher({
            'https://apex.com': _page('https://apex.com', body=''),
            'http://apex.com': FetchFailure('Connection Refused'),
            'https://www.apex.com': _page('https://www.apex.com'),
        })

        [result] = _run(BatchScanner(fetcher=fetcher), ['apex.com'])

        assert result.reason == ''
        assert result.profile.name == 'Acme'

    def test_all_blank_reports_first_success(self, make_fetcher):
        fetcher = make_fetcher({'https://empty.com': _page('https://empty.com', body=' ')})

        [result] = _run(BatchScanner(fetcher=fetcher), ['empty.com'])

        assert result.status is ScanStatus.ACTIVE
        assert result.reason == 'Blank / No Content'

    def test_first_candidate_only(self, make_fetcher):
        fetcher = make_fetcher({'https://one.com': FetchFailure('Timed Out')})

        [result] = _run(BatchScanner(ScanConfig(try_all_candidates=False), fetcher=fetcher), ['one.com'])

        assert result.reason == 'Timed Out'
        assert fetcher.calls == ['https://one.com']

    def test_invalid_domain(self, make_fetcher):
        fetcher = make_fetcher()

        results = _run(BatchScanner(fetcher=fetcher), ['   ', 'https://'])

        assert [(r.domain, r.status, r.status_code, r.reason) for r in results] == [
            ('', ScanStatus.INACTIVE, 0, 'Invalid Domain'),
            ('', ScanStatus.INACTIVE, 0, 'Invalid Domain'),
        ]
        assert fetcher.calls == []

    def test_unit_error_is_isolated(self, make_fetcher):
        fetcher = make_fetcher({
            'https://good.com': _page('https://good.com'),
            'https://bad.com': RuntimeError('boom'),
        })

        results = _run(BatchScanner(fetcher=fetcher), ['good.com', 'bad.com'])

        assert results[0].status is ScanStatus.ACTIVE
        assert results[1].domain == 'bad.com'
        assert results[1].status is ScanStatus.INACTIVE
        assert results[1].reason == 'Unknown Error: boom'

    def test_progress_callback(self, make_fetcher):
        seen = {}
        fetcher = make_fetcher({'https://a.com': _page('https://a.com')})

        _run(BatchScanner(fetcher=fetcher), ['a.com', 'b.com', ''],
             on_result=lambda index, result: seen.setdefault(index, result.domain))

        assert seen == {0: 'a.com', 1: 'b.com', 2: ''}

    @pytest.mark.parametrize('bad', [{'concurrency': 0}, {'http_timeout': 0}])
    def test_config_validation(self, bad):
        with pytest.raises(ValueError):
            ScanConfig(**bad)

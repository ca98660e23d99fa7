"""
Unit Tests for liveness classification
"""

import pytest

from domain_intel.scanner.classifier import ContentClassifier, ContentRule
from domain_intel.util.types import FetchFailure, FetchSuccess, ScanStatus


def _page(body, status=200, url='https://example.com/'):
    return FetchSuccess(status_code=status, final_url=url, body=body)


class TestContentClassifier:
    """Status code stage plus ordered content rules"""

    @pytest.fixture
    def classifier(self):
        return ContentClassifier()

    def test_transport_failure(self, classifier):
        result = classifier.classify('example.com', FetchFailure('DNS Not Found'))
        assert result == (ScanStatus.INACTIVE, 0, 'DNS Not Found')

    def test_plain_live_page(self, classifier):
        result = classifier.classify('example.com', _page('<h1>Welcome to Acme</h1>'))
        assert result == (ScanStatus.ACTIVE, 200, '')

    @pytest.mark.parametrize('code', [200, 301, 399])
    def test_active_range(self, classifier, code):
        status, _, _ = classifier.classify('example.com', _page('<p>hi</p>', status=code))
        assert status is ScanStatus.ACTIVE

    def test_http_error(self, classifier):
        result = classifier.classify('example.com', _page('Not here', status=404))
        assert result == (ScanStatus.INACTIVE, 404, 'HTTP 404')

    def test_empty_error_page_keeps_http_reason(self, classifier):
        result = classifier.classify('example.com', _page('', status=503))
        assert result == (ScanStatus.INACTIVE, 503, 'HTTP 503')

    def test_parked_forces_inactive(self, classifier):
        result = classifier.classify('example.com', _page('<h1>This domain is for sale!</h1>'))
        assert result == (ScanStatus.INACTIVE, 200, 'Parked Domain')

    def test_parked_on_error_status(self, classifier):
        result = classifier.classify('example.com', _page('This domain is for sale', status=404))
        assert result == (ScanStatus.INACTIVE, 404, 'Parked Domain')

    def test_coming_soon(self, classifier):
        result = classifier.classify('example.com', _page('<h1>Coming Soon</h1>'))
        assert result == (ScanStatus.ACTIVE, 200, 'Coming Soon')

    def test_later_rule_wins(self, classifier):
        body = '<h1>Coming soon</h1><p>Site under construction</p>'
        _, _, reason = classifier.classify('example.com', _page(body))
        assert reason == 'Under Construction'

    def test_parked_beats_coming_soon(self, classifier):
        body = 'Coming soon. Buy this domain today.'
        status, _, reason = classifier.classify('example.com', _page(body))
        assert status is ScanStatus.INACTIVE
        assert reason == 'Parked Domain'

    def test_blank(self, classifier):
        result = classifier.classify('example.com', _page('  \n\t '))
        assert result == (ScanStatus.ACTIVE, 200, 'Blank / No Content')

    def test_large_body_skips_phrases(self):
        classifier = ContentClassifier(content_scan_limit=100)
        body = 'coming soon ' + 'x' * 200
        assert classifier.classify('example.com', _page(body)) == (ScanStatus.ACTIVE, 200, '')

    def test_redirected_off_domain(self, classifier):
        _, _, reason = classifier.classify('example.com', _page('<p>hi</p>', url='https://other.net/'))
        assert reason == 'Redirected'

    def test_www_redirect_is_same_site(self, classifier):
        _, _, reason = classifier.classify('example.com', _page('<p>hi</p>', url='https://www.example.com/home'))
        assert reason == ''

    def test_custom_rules(self):
        rule = ContentRule('maintenance', 'Maintenance', lambda page: 'maintenance' in page.text,
                           forces_inactive=True)
        classifier = ContentClassifier(rules=[rule])
        result = classifier.classify('example.com', _page('Down for Maintenance'))
        assert result == (ScanStatus.INACTIVE, 200, 'Maintenance')

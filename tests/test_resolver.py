"""
Unit Tests for domain normalization and candidate URLs
"""

import pytest

from domain_intel.scanner.resolver import candidate_urls, normalize_domain, resolve


class TestNormalizeDomain:
    """Raw input shapes that should collapse to one canonical domain"""

    @pytest.mark.parametrize('raw', [
        'example.com',
        'Example.COM',
        'https://example.com',
        'HTTP://example.com/',
        '  http://example.com//  ',
        'https://example.com/about?ref=1#top',
        'example.com.',
    ])
    def test_same_target(self, raw):
        assert normalize_domain(raw) == 'example.com'

    def test_keeps_subdomain_and_port(self):
        assert normalize_domain('https://shop.example.com:8443/cart') == 'shop.example.com:8443'

    @pytest.mark.parametrize('raw', ['', '   ', 'https://', '///', None])
    def test_unusable(self, raw):
        assert normalize_domain(raw) == ''


class TestCandidateUrls:
    def test_full_order(self):
        assert candidate_urls('example.com') == [
            'https://example.com',
            'http://example.com',
            'https://www.example.com',
            'http://www.example.com',
        ]

    def test_www_domain_gets_no_double_prefix(self):
        assert candidate_urls('www.example.com') == [
            'https://www.example.com',
            'http://www.example.com',
        ]

    def test_first_only(self):
        assert candidate_urls('example.com', try_all=False) == ['https://example.com']

    def test_empty_domain(self):
        assert candidate_urls('') == []


def test_resolve_invalid_has_no_candidates():
    resolved = resolve('  ')
    assert resolved.domain == ''
    assert resolved.candidates == []


def test_resolve_attaches_candidates():
    resolved = resolve('https://Acme.io/')
    assert resolved.domain == 'acme.io'
    assert resolved.candidates[0] == 'https://acme.io'

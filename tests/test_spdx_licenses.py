from __future__ import annotations

import json
import urllib.error

import pytest

from spdx_licenses import (
    LicenseDataError,
    LicenseFetchError,
    find_spdx_license,
    license_list_url,
    license_object,
    normalize_license,
)
from tests.conftest import FakeResponse, install_urlopen

MIT = {
    'reference': 'https://spdx.org/licenses/MIT.html',
    'name': 'MIT License',
    'licenseId': 'MIT',
}


def test_license_list_url(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv('SPDX_LICENSE_LIST_BASE', raising=False)
    assert license_list_url('3.17') == (
        'https://raw.githubusercontent.com/spdx/license-list-data/v3.17/json/licenses.json'
    )


def test_license_list_url_honours_mirror(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv('SPDX_LICENSE_LIST_BASE', 'https://mirror.example.com/spdx/')
    assert license_list_url('3.20') == 'https://mirror.example.com/spdx/v3.20/json/licenses.json'


def test_modern_shape_for_openapi_31(spdx_requests: list[str]):
    assert normalize_license('MIT', '3.17', '3.1.0') == {'name': 'MIT License', 'identifier': 'MIT'}
    assert spdx_requests[0].endswith('/v3.17/json/licenses.json')


def test_legacy_shape_before_openapi_31(spdx_requests: list[str]):
    assert normalize_license('Apache-2.0', '3.17', '3.0.3') == {
        'name': 'Apache License 2.0',
        'url': 'https://spdx.org/licenses/Apache-2.0.html',
    }


def test_license_object_never_has_both_fields():
    assert set(license_object(MIT, '3.2.0')) == {'name', 'identifier'}
    assert set(license_object(MIT, '3.0.0')) == {'name', 'url'}


def test_malformed_openapi_version_uses_modern_shape():
    assert license_object(MIT, '3.1') == {'name': 'MIT License', 'identifier': 'MIT'}


def test_unknown_identifier_is_none(spdx_requests: list[str]):
    assert normalize_license('NOT-A-REAL-LICENSE', '3.17', '3.1.0') is None


def test_identifier_match_is_case_sensitive(spdx_requests: list[str]):
    assert find_spdx_license('mit', '3.17') is None
    assert find_spdx_license('MIT', '3.17')['name'] == 'MIT License'


def test_every_lookup_fetches(spdx_requests: list[str]):
    normalize_license('MIT', '3.17', '3.1.0')
    normalize_license('MIT', '3.17', '3.1.0')
    assert len(spdx_requests) == 2


def test_empty_identifier_skips_fetch(spdx_requests: list[str]):
    assert normalize_license(None, '3.17', '3.1.0') is None
    assert normalize_license('', '3.17', '3.1.0') is None
    assert spdx_requests == []


def test_http_error_is_fetch_failure(monkeypatch: pytest.MonkeyPatch):
    def _not_found(url: str):
        raise urllib.error.HTTPError(url, 404, 'Not Found', None, None)

    install_urlopen(monkeypatch, _not_found)
    with pytest.raises(LicenseFetchError, match='404'):
        normalize_license('MIT', '9.99', '3.1.0')


def test_transport_error_is_fetch_failure(monkeypatch: pytest.MonkeyPatch):
    def _offline(url: str):
        raise urllib.error.URLError('network unreachable')

    install_urlopen(monkeypatch, _offline)
    with pytest.raises(LicenseFetchError):
        normalize_license('MIT', '3.17', '3.1.0')


def test_non_200_status_is_fetch_failure(monkeypatch: pytest.MonkeyPatch):
    install_urlopen(monkeypatch, lambda url: FakeResponse(b'{}', status=204))
    with pytest.raises(LicenseFetchError, match='204'):
        normalize_license('MIT', '3.17', '3.1.0')


def test_non_json_body_is_malformed(monkeypatch: pytest.MonkeyPatch):
    install_urlopen(monkeypatch, lambda url: FakeResponse(b'<html>rate limited</html>'))
    with pytest.raises(LicenseDataError):
        normalize_license('MIT', '3.17', '3.1.0')


def test_missing_licenses_list_is_malformed(monkeypatch: pytest.MonkeyPatch):
    body = json.dumps({'licenseListVersion': '3.17'}).encode('utf-8')
    install_urlopen(monkeypatch, lambda url: FakeResponse(body))
    with pytest.raises(LicenseDataError, match='licenses'):
        normalize_license('MIT', '3.17', '3.1.0')

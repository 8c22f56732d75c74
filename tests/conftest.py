from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

import spdx_licenses

SPDX_LICENSES: dict[str, Any] = {
    'licenseListVersion': '3.17',
    'licenses': [
        {
            'reference': 'https://spdx.org/licenses/Apache-2.0.html',
            'isDeprecatedLicenseId': False,
            'name': 'Apache License 2.0',
            'licenseId': 'Apache-2.0',
            'isOsiApproved': True,
        },
        {
            'reference': 'https://spdx.org/licenses/MIT.html',
            'isDeprecatedLicenseId': False,
            'name': 'MIT License',
            'licenseId': 'MIT',
            'isOsiApproved': True,
        },
    ],
}


class FakeResponse:
    def __init__(self, body: bytes, status: int = 200):
        self.body = body
        self.status = status

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc_info: object) -> bool:
        return False

    def read(self) -> bytes:
        return self.body


def install_urlopen(monkeypatch: pytest.MonkeyPatch, handler: Callable[..., Any]) -> list[str]:
    """Route license list downloads to `handler`; returns the requested URLs."""
    requested: list[str] = []

    def _urlopen(url: str, timeout: float | None = None) -> Any:
        requested.append(url)
        return handler(url)

    monkeypatch.setattr(spdx_licenses.urllib.request, 'urlopen', _urlopen)
    return requested


@pytest.fixture
def spdx_requests(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    body = json.dumps(SPDX_LICENSES).encode('utf-8')
    return install_urlopen(monkeypatch, lambda url: FakeResponse(body))


# ── Factory functions ─────────────────────────────────────────────────────────


def write_manifest(directory: Path, **overrides: Any) -> Path:
    data: dict[str, Any] = {
        'name': 'petstore',
        'description': 'Pet store API',
        'version': '2.0.0',
        'license': 'MIT',
        'author': 'Jane Doe <jane@example.com> (https://jane.example.com)',
    }
    data.update(overrides)
    path = directory / 'package.json'
    path.write_text(json.dumps(data), encoding='utf-8')
    return path

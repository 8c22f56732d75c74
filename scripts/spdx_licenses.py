#!/usr/bin/env python3
"""
Resolve SPDX license identifiers into OpenAPI License Objects.

License data comes from the published SPDX license list:
https://github.com/spdx/license-list-data
"""
from __future__ import annotations

import json
import os
import urllib.error
import urllib.request
from typing import Any, Optional

from version_utils import compare_version

DEFAULT_SPDX_VERSION = "3.17"
DEFAULT_TIMEOUT = 30.0
SPDX_LIST_BASE = "https://raw.githubusercontent.com/spdx/license-list-data"
# OpenAPI 3.1 added License Object `identifier`, mutually exclusive with `url`
IDENTIFIER_SINCE = "3.1.0"


class LicenseFetchError(RuntimeError):
    """The SPDX license list could not be downloaded."""


class LicenseDataError(ValueError):
    """The SPDX license list was not in the expected shape."""


def license_list_url(spdx_version: str) -> str:
    base = os.getenv("SPDX_LICENSE_LIST_BASE") or SPDX_LIST_BASE
    return f"{base.rstrip('/')}/v{spdx_version}/json/licenses.json"


def fetch_license_list(spdx_version: str, *, timeout: float = DEFAULT_TIMEOUT) -> list[dict[str, Any]]:
    url = license_list_url(spdx_version)
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:  # noqa: S310 - fixed https source
            status = getattr(response, "status", 200)
            if status != 200:
                raise LicenseFetchError(f"GET {url} returned HTTP {status}")
            body = response.read()
    except urllib.error.HTTPError as exc:
        raise LicenseFetchError(f"GET {url} returned HTTP {exc.code}") from exc
    except (urllib.error.URLError, TimeoutError) as exc:
        raise LicenseFetchError(f"failed to fetch {url}: {exc}") from exc

    try:
        doc = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise LicenseDataError(f"{url} did not return JSON: {exc}") from exc
    licenses = doc.get("licenses") if isinstance(doc, dict) else None
    if not isinstance(licenses, list):
        raise LicenseDataError(f"{url} lacks a 'licenses' list")
    return [entry for entry in licenses if isinstance(entry, dict)]


def find_spdx_license(
    identifier: str, spdx_version: str, *, timeout: float = DEFAULT_TIMEOUT
) -> Optional[dict[str, Any]]:
    for entry in fetch_license_list(spdx_version, timeout=timeout):
        if entry.get("licenseId") == identifier:
            return entry
    return None


def license_object(record: dict[str, Any], openapi_version: str) -> dict[str, Any]:
    if compare_version(openapi_version, IDENTIFIER_SINCE) >= 0:
        return {"name": record.get("name"), "identifier": record.get("licenseId")}
    return {"name": record.get("name"), "url": record.get("reference")}


def normalize_license(
    identifier: Optional[str],
    spdx_version: str,
    openapi_version: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> Optional[dict[str, Any]]:
    """Return the License Object for `identifier`, or None when SPDX has no such id."""
    if not identifier:
        return None
    record = find_spdx_license(identifier, spdx_version, timeout=timeout)
    if record is None:
        return None
    return license_object(record, openapi_version)

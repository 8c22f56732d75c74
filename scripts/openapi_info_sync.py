#!/usr/bin/env python3
"""
Sync the `info` block of an OpenAPI document with the project manifest.

Title, description, version, license and contact are taken from
package.json (or pyproject.toml) unless given on the command line. The
license id is looked up in the SPDX license list and written as the
License Object shape the target OpenAPI version expects.

For each field listed in --override, a new value replaces what the
document holds; a field with no new value (no manifest version, unknown
license) is left alone. Any other field keeps the document's value and is
only filled in when missing.

Usage:
    python scripts/openapi_info_sync.py [--openapi-file spec/openapi.yaml] \
        [--override version,license,description] [--check]
"""
from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from manifest_utils import find_manifest, infer_contact, load_manifest
from openapi_doc import OpenAPIDocument
from spdx_licenses import (
    DEFAULT_SPDX_VERSION,
    DEFAULT_TIMEOUT,
    LicenseFetchError,
    normalize_license,
)

INFO_FIELDS = ("title", "description", "version", "license", "contact")
DEFAULT_OVERRIDE = frozenset({"version", "license"})
DEFAULT_OPENAPI_FILE = "openapi.yaml"
DEFAULT_OPENAPI_VERSION = "3.1.0"


@dataclass(frozen=True)
class Options:
    openapi_file: Path
    openapi_version: str
    title: Optional[str]
    description: Optional[str]
    version: Optional[str]
    license: Optional[str]
    contact: Optional[dict[str, Any]]
    override: frozenset[str]
    spdx_license_data_version: str
    timeout: float = DEFAULT_TIMEOUT
    check: bool = False


def merge_info(
    desired: Mapping[str, Any],
    existing: Mapping[str, Any],
    overrides: frozenset[str] | set[str],
) -> dict[str, Any]:
    """Pick, per field, the desired value or the one already in the document."""
    merged: dict[str, Any] = {}
    for field in INFO_FIELDS:
        wanted = desired.get(field)
        current = existing.get(field)
        # a missing value (unresolved license, dynamic version) has nothing to override with
        if field in overrides and wanted is not None:
            merged[field] = wanted
        else:
            merged[field] = current if current is not None else wanted
    return merged


def build_info(existing: Mapping[str, Any], merged: Mapping[str, Any]) -> dict[str, Any]:
    """Apply merged fields onto the existing info mapping, keeping unmanaged keys."""
    info = dict(existing)
    for field in INFO_FIELDS:
        value = merged.get(field)
        if value is None:
            info.pop(field, None)
        else:
            info[field] = value
    return info


def sync_info(options: Options) -> bool:
    document = OpenAPIDocument.load(options.openapi_file)
    license_object = normalize_license(
        options.license,
        options.spdx_license_data_version,
        options.openapi_version,
        timeout=options.timeout,
    )
    if options.license and license_object is None:
        print(
            f"warning: {options.license!r} is not in SPDX license list "
            f"v{options.spdx_license_data_version}; license left as is",
            file=sys.stderr,
        )
    desired = {
        "title": options.title,
        "description": options.description,
        "version": options.version,
        "license": license_object,
        "contact": options.contact,
    }
    merged = merge_info(desired, document.info, options.override)
    return document.save(build_info(document.info, merged), options.openapi_version, check=options.check)


def parse_fields(value: str) -> frozenset[str]:
    names = frozenset(name.strip() for name in value.split(",") if name.strip())
    unknown = sorted(names - set(INFO_FIELDS))
    if unknown:
        raise argparse.ArgumentTypeError(
            f"unknown field(s) {', '.join(unknown)}; choose from {', '.join(INFO_FIELDS)}"
        )
    return names


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Infer OpenAPI info values from the project manifest."
    )
    parser.add_argument(
        "--openapi-file",
        default=os.getenv("OPENAPI_FILE", DEFAULT_OPENAPI_FILE),
        help="OpenAPI document to create or update (default: %(default)s).",
    )
    parser.add_argument(
        "--openapi-version",
        default=DEFAULT_OPENAPI_VERSION,
        help="OpenAPI specification version (default: %(default)s).",
    )
    parser.add_argument(
        "--manifest",
        help="package.json or pyproject.toml to read (default: found in cwd).",
    )
    parser.add_argument("--title", help="Title of the API (default: manifest name).")
    parser.add_argument("--description", help="Description of the API (default: manifest description).")
    parser.add_argument("--version", help="API version (default: manifest version).")
    parser.add_argument(
        "--license",
        help="SPDX license identifier, NONE, UNLICENSED, or URL (default: manifest license).",
    )
    parser.add_argument("--contact-name", help="Point of contact name.")
    parser.add_argument("--contact-email", help="Point of contact email.")
    parser.add_argument("--contact-url", help="Point of contact URL.")
    parser.add_argument(
        "--override",
        type=parse_fields,
        default=DEFAULT_OVERRIDE,
        help="Comma-separated fields that replace existing values (default: version,license).",
    )
    parser.add_argument(
        "--spdx-license-data-version",
        default=os.getenv("SPDX_LICENSE_DATA_VERSION", DEFAULT_SPDX_VERSION),
        help="SPDX license list release to resolve against (default: %(default)s).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Seconds to wait for the SPDX license list (default: %(default)s).",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit 1 if the document would change; write nothing.",
    )
    return parser


def resolve_options(args: argparse.Namespace, cwd: Optional[Path] = None) -> Options:
    """Fill in flags left unset from the manifest."""
    manifest_path = Path(args.manifest) if args.manifest else find_manifest(cwd or Path.cwd())
    manifest = load_manifest(manifest_path)

    contact_flags = {
        "name": args.contact_name,
        "email": args.contact_email,
        "url": args.contact_url,
    }
    if any(contact_flags.values()):
        contact = {key: value for key, value in contact_flags.items() if value}
    else:
        contact = infer_contact(manifest.get("author"))

    return Options(
        openapi_file=Path(args.openapi_file),
        openapi_version=args.openapi_version,
        title=args.title if args.title is not None else manifest.get("name"),
        description=args.description if args.description is not None else manifest.get("description"),
        version=args.version if args.version is not None else manifest.get("version"),
        license=args.license if args.license is not None else manifest.get("license"),
        contact=contact or None,
        override=args.override,
        spdx_license_data_version=args.spdx_license_data_version,
        timeout=args.timeout,
        check=args.check,
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        options = resolve_options(args)
        existed = options.openapi_file.exists()
        changed = sync_info(options)
    except (LicenseFetchError, OSError, ValueError) as exc:
        raise SystemExit(f"error: {exc}") from exc

    target = options.openapi_file
    if options.check:
        if changed:
            print(f"{target} info is out of date; rerun without --check")
            return 1
        print(f"{target} info is up to date")
        return 0
    if not changed:
        print("no changes")
    elif existed:
        print(f"updated {target}")
    else:
        print(f"created {target}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
"""Dotted version helpers shared by the OpenAPI maintenance scripts."""
from __future__ import annotations

import math
import re
from typing import Tuple

_DIGITS = re.compile(r"^\s*(\d+)\s*$")


def _part(value: str | None) -> float:
    if value is None:
        return math.nan
    match = _DIGITS.match(value)
    if not match:
        return math.nan
    return int(match.group(1))


def parse_version(version: str) -> Tuple[float, float, float]:
    """Return (major, minor, patch); missing or non-numeric parts are NaN."""
    parts = str(version).split(".")
    parts += [None] * (3 - len(parts))
    major, minor, patch = parts[:3]
    return _part(major), _part(minor), _part(patch)


def compare_version(version1: str, version2: str) -> int:
    """Compare two version strings.

    Returns 0 for identical strings and -1 only when both versions parse
    cleanly and version1 is lower. Anything else, malformed input included,
    compares as 1.
    """
    if version1 == version2:
        return 0
    left = parse_version(version1)
    right = parse_version(version2)
    if any(math.isnan(part) for part in left + right):
        return 1
    return -1 if left < right else 1

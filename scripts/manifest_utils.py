#!/usr/bin/env python3
"""Read project manifests and derive the API point of contact from them."""
from __future__ import annotations

import getpass
import json
import os
import re
import subprocess
import tomllib
from pathlib import Path
from typing import Any, Optional

MANIFEST_NAMES = ("package.json", "pyproject.toml")

# npm author shorthand: "Name <email> (url)", every part optional
AUTHOR_RE = re.compile(r"^([^<(]+?)?[ \t]*(?:<([^>(]+?)>)?[ \t]*(?:\(([^)]+?)\)|$)")


def parse_author(text: str) -> dict[str, str]:
    if not text or not re.search(r"\w", text):
        return {}
    match = AUTHOR_RE.match(text.strip())
    if not match:
        # unclosed "<" or "(": keep the name in front of it
        name = re.match(r"^([^<(]*)", text).group(1).strip()
        return {"name": name} if name else {}
    author: dict[str, str] = {}
    for key, value in zip(("name", "email", "url"), match.groups()):
        if value and value.strip():
            author[key] = value.strip()
    return author


def _git_config(key: str) -> Optional[str]:
    try:
        value = subprocess.check_output(
            ["git", "config", "--get", key], text=True, stderr=subprocess.DEVNULL
        ).strip()
    except (OSError, subprocess.CalledProcessError):
        return None
    return value or None


def _login_name() -> Optional[str]:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return None


def local_identity() -> dict[str, str]:
    """Best-effort identity of whoever runs the script."""
    identity = {
        "name": _git_config("user.name") or os.getenv("GIT_AUTHOR_NAME") or _login_name(),
        "email": _git_config("user.email") or os.getenv("GIT_AUTHOR_EMAIL"),
        "url": os.getenv("AUTHOR_URL"),
    }
    return {key: value for key, value in identity.items() if value}


def infer_contact(author: Any) -> dict[str, Any]:
    if isinstance(author, dict):
        return author
    if isinstance(author, str):
        return parse_author(author)
    return local_identity()


def find_manifest(directory: Path) -> Optional[Path]:
    for name in MANIFEST_NAMES:
        candidate = directory / name
        if candidate.exists():
            return candidate
    return None


def _from_pyproject(data: dict[str, Any]) -> dict[str, Any]:
    project = data.get("project") or {}
    license_value = project.get("license")
    if isinstance(license_value, dict):
        license_value = license_value.get("text")
    authors = project.get("authors") or []
    return {
        "name": project.get("name"),
        "description": project.get("description"),
        "version": project.get("version"),
        "license": license_value,
        "author": authors[0] if authors else None,
    }


def load_manifest(path: Optional[Path]) -> dict[str, Any]:
    """Return name/description/version/license/author from package.json or pyproject.toml."""
    if path is None or not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".toml":
        try:
            return _from_pyproject(tomllib.loads(text))
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"failed to parse {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"failed to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path} root must be an object")
    manifest = {key: data.get(key) for key in ("name", "description", "version", "license", "author")}
    if isinstance(manifest["license"], dict):
        # legacy npm form: {"type": "MIT", "url": "..."}
        manifest["license"] = manifest["license"].get("type")
    return manifest

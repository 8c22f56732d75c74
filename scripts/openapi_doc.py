#!/usr/bin/env python3
"""
Read and amend the `info` block of an OpenAPI YAML document.

A document that already exists is edited by splicing: PyYAML's composer
reports the source span of the `info` entry and only that span is
re-serialized. Comments, blank lines, quoting and key order everywhere
else stay byte-for-byte as they were. A document that does not exist yet
is written in canonical `yaml.safe_dump` form.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml


class DocumentError(ValueError):
    """The target document exists but cannot be edited safely."""


def _node_end(node: yaml.Node) -> int:
    # Block collections end where the next token starts; use the last child instead.
    if isinstance(node, yaml.MappingNode) and not node.flow_style and node.value:
        return _node_end(node.value[-1][1])
    if isinstance(node, yaml.SequenceNode) and not node.flow_style and node.value:
        return _node_end(node.value[-1])
    return node.end_mark.index


def _find_entry(root: yaml.MappingNode, key: str) -> Optional[tuple[yaml.Node, yaml.Node]]:
    for key_node, value_node in root.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
            return key_node, value_node
    return None


def _dump_block(info: dict[str, Any], column: int, newline: str) -> str:
    block = yaml.safe_dump({"info": info}, sort_keys=False, allow_unicode=True).rstrip("\n")
    return (newline + " " * column).join(block.split("\n"))


def splice_info(text: str, info: dict[str, Any]) -> str:
    """Return `text` with the top-level `info` entry replaced by `info`."""
    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as exc:
        raise DocumentError(f"invalid YAML: {exc}") from exc
    if not isinstance(root, yaml.MappingNode) or root.flow_style:
        raise DocumentError("document root must be a block mapping")

    newline = "\r\n" if "\r\n" in text else "\n"
    entry = _find_entry(root, "info")
    if entry is not None:
        key_node, value_node = entry
        start = key_node.start_mark.index
        end = len(text[: _node_end(value_node)].rstrip())
        block = _dump_block(info, key_node.start_mark.column, newline)
        return text[:start] + block + text[end:]

    column = root.value[0][0].start_mark.column if root.value else 0
    block = " " * column + _dump_block(info, column, newline)
    anchor = _find_entry(root, "openapi")
    if anchor is not None:
        eol = text.find("\n", _node_end(anchor[1]))
        if eol != -1:
            return text[: eol + 1] + block + newline + text[eol + 1 :]
    if text and not text.endswith("\n"):
        text += newline
    return text + block + newline


class OpenAPIDocument:
    """An OpenAPI document on disk, read once and written at most once."""

    def __init__(self, path: Path, text: Optional[str] = None, data: Optional[dict[str, Any]] = None):
        self.path = path
        self.text = text
        self.data = data or {}

    @classmethod
    def load(cls, path: Path) -> "OpenAPIDocument":
        if not path.exists():
            return cls(path)
        with path.open("r", encoding="utf-8", newline="") as handle:
            text = handle.read()
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise DocumentError(f"failed to parse {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise DocumentError(f"{path} root must be a mapping")
        return cls(path, text, data)

    @property
    def exists(self) -> bool:
        return self.text is not None

    @property
    def info(self) -> dict[str, Any]:
        info = self.data.get("info")
        return info if isinstance(info, dict) else {}

    def render(self, info: dict[str, Any], openapi_version: str) -> str:
        if self.text is None:
            doc = {"openapi": openapi_version, "info": info, "paths": {}}
            return yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)
        try:
            return splice_info(self.text, info)
        except DocumentError as exc:
            raise DocumentError(f"{self.path}: {exc}") from exc

    def save(self, info: dict[str, Any], openapi_version: str, *, check: bool = False) -> bool:
        """Write the amended document; return True when the file content changes."""
        if self.exists and "info" in self.data and info == self.info:
            return False
        rendered = self.render(info, openapi_version)
        if rendered == self.text:
            return False
        if check:
            return True
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(rendered)
        self.text = rendered
        self.data = yaml.safe_load(rendered)
        return True

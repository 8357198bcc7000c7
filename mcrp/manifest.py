"""Manifest model and its JSON interchange encoding.

The manifest is the only place per-file keys are recorded::

    {"version": 1, "content": [{"path": "a.txt", "key": "..."}, {"path": "b.txt", "key": null}]}

A ``null`` key means the file was stored verbatim. An empty string is a
different (if useless) key and is preserved as such.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .constants import MANIFEST_VERSION
from .errors import MalformedManifestError
from .pathutil import norm_path


@dataclass(frozen=True)
class ManifestEntry:
    path: str
    key: Optional[str] = None

    @property
    def encrypted(self) -> bool:
        return self.key is not None


@dataclass(frozen=True)
class Manifest:
    version: int = MANIFEST_VERSION
    content: List[ManifestEntry] = field(default_factory=list)

    def files(self) -> List[str]:
        return [e.path for e in self.content]


def encode_manifest(manifest: Manifest) -> bytes:
    doc = {
        "version": manifest.version,
        "content": [{"path": e.path, "key": e.key} for e in manifest.content],
    }
    return json.dumps(doc, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _decode_entry(raw: Any, seen: set) -> ManifestEntry:
    if not isinstance(raw, dict):
        raise MalformedManifestError("Manifest entry must be an object")
    path = raw.get("path")
    if not isinstance(path, str):
        raise MalformedManifestError("Manifest entry is missing a string 'path'")
    try:
        normalized = norm_path(path)
    except ValueError as exc:
        raise MalformedManifestError(f"Invalid manifest path {path!r}: {exc}") from exc
    if not normalized:
        raise MalformedManifestError("Manifest entry has an empty path")
    if normalized in seen:
        raise MalformedManifestError(f"Duplicate manifest path: {normalized}")
    seen.add(normalized)
    key = raw.get("key")
    if key is not None and not isinstance(key, str):
        raise MalformedManifestError(f"Manifest key for {normalized} must be a string or null")
    return ManifestEntry(path=normalized, key=key)


def decode_manifest(data: bytes) -> Manifest:
    """Parse a decrypted manifest payload.

    The version number is returned as found; deciding whether it is supported
    is left to the caller.

    Raises:
        MalformedManifestError: If the payload is not valid UTF-8 JSON of the
            expected shape (this is also what a wrong master key looks like).
    """
    try:
        doc = json.loads(bytes(data).decode("utf-8"))
    except ValueError as exc:  # UnicodeDecodeError and JSONDecodeError
        raise MalformedManifestError(f"Manifest is not valid JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise MalformedManifestError("Manifest root must be an object")
    version = doc.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise MalformedManifestError("Manifest 'version' must be an integer")
    content = doc.get("content")
    if not isinstance(content, list):
        raise MalformedManifestError("Manifest 'content' must be a list")
    seen: set = set()
    entries = [_decode_entry(raw, seen) for raw in content]
    return Manifest(version=version, content=entries)

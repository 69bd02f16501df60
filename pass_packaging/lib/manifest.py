"""Manifest computation: archive entry name -> SHA-1 digest of its bytes."""

import hashlib
import json
from collections.abc import Iterable
from pathlib import Path

from .errors import FileReadError

_CHUNK_SIZE = 64 * 1024


def file_digest(path: Path) -> str:
    """Return the lowercase hex SHA-1 of a file, read in chunks."""
    digest = hashlib.sha1()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def compute_manifest(entries: Iterable[tuple[str, Path]]) -> dict[str, str]:
    """Hash every (name, path) entry.

    Digests are computed fresh on each call. A repeated name keeps the digest
    of its last occurrence, matching last-write-wins staging.

    Raises:
        FileReadError: If any file cannot be read
    """
    manifest: dict[str, str] = {}
    for name, path in entries:
        try:
            manifest[name] = file_digest(path)
        except OSError as e:
            raise FileReadError(name, path, e) from e
    return manifest


def serialize_manifest(manifest: dict[str, str]) -> bytes:
    """Serialize a manifest mapping to UTF-8 JSON bytes."""
    return json.dumps(manifest).encode("utf-8")


def build_manifest(entries: Iterable[tuple[str, Path]]) -> bytes:
    """Compute and serialize the manifest for the given entries.

    Nothing is returned unless every entry was read successfully.

    Raises:
        FileReadError: If any file cannot be read
    """
    return serialize_manifest(compute_manifest(entries))

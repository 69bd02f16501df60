"""Signing credential sources and their file-backed resolution.

A credential field is either a :class:`FilePath` to an existing PEM file or
:class:`InlineContent` holding the PEM bytes. Signing tools need files, so
:func:`resolve` materializes inline content into private temp files that the
resolved credentials own until :func:`dispose` removes them.
"""

import os
import secrets
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path

from .errors import FileWriteError, InvalidCredentialSource, Stage
from .logging_config import LOGGER


@dataclass(frozen=True)
class FilePath:
    """Credential stored in a file the caller owns."""

    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))


@dataclass(frozen=True)
class InlineContent:
    """Credential supplied as raw PEM content."""

    content: bytes

    def __post_init__(self) -> None:
        if isinstance(self.content, str):
            object.__setattr__(self, "content", self.content.encode("utf-8"))

    def __repr__(self) -> str:
        # Key material must not leak into logs or tracebacks
        return f"InlineContent(<{len(self.content)} bytes>)"


CredentialSource = FilePath | InlineContent


@dataclass
class SigningCredentials:
    """WWDR certificate, signer certificate and private key for pass signing.

    ``temp_files`` is populated by :func:`resolve` and lists only the files
    it created; caller-supplied paths never appear there.
    """

    wwdr: CredentialSource
    certificate: CredentialSource
    private_key: CredentialSource
    key_password: str | None = field(default=None, repr=False)
    temp_files: list[Path] = field(default_factory=list, init=False, repr=False)

    @property
    def is_resolved(self) -> bool:
        return all(isinstance(source, FilePath) for source in self.sources())

    def sources(self) -> tuple[object, object, object]:
        return (self.wwdr, self.certificate, self.private_key)


def _random_filename() -> str:
    return f"{secrets.token_hex(16)}.pem"


def _validate_source(source: object) -> None:
    if not isinstance(source, (FilePath, InlineContent)):
        raise InvalidCredentialSource(source)


def _materialize(source: CredentialSource, temp_dir: Path, owned: list[Path]) -> FilePath:
    """Return a file-backed source, writing inline content to a new temp file."""
    if isinstance(source, FilePath):
        return source

    tmp_path = temp_dir / _random_filename()
    try:
        # O_EXCL with a 0600 mode keeps the secret private to this process owner
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        owned.append(tmp_path)
        with os.fdopen(fd, "wb") as handle:
            handle.write(source.content)
    except OSError as e:
        raise FileWriteError(tmp_path, e, stage=Stage.RESOLVE_CREDENTIALS) from e

    return FilePath(tmp_path)


def resolve(credentials: SigningCredentials, temp_dir: Path | None = None) -> SigningCredentials:
    """Make every credential source file-backed.

    All three sources are validated before any file is written. If writing a
    temp file fails, the files already written by this call are removed.

    Args:
        credentials: Credentials with FilePath and/or InlineContent sources
        temp_dir: Directory for materialized content (default: system temp dir)

    Returns:
        New SigningCredentials whose sources are all FilePath and whose
        temp_files lists the files created here

    Raises:
        InvalidCredentialSource: If a source is neither FilePath nor InlineContent
        FileWriteError: If inline content cannot be written to disk
    """
    for source in credentials.sources():
        _validate_source(source)

    directory = Path(temp_dir) if temp_dir is not None else Path(tempfile.gettempdir())
    owned: list[Path] = []
    try:
        wwdr = _materialize(credentials.wwdr, directory, owned)
        certificate = _materialize(credentials.certificate, directory, owned)
        private_key = _materialize(credentials.private_key, directory, owned)
    except FileWriteError:
        _remove_files(owned)
        raise

    if owned:
        LOGGER.info("Materialized %d inline credential(s) to temp files", len(owned))

    prepared = replace(credentials, wwdr=wwdr, certificate=certificate, private_key=private_key)
    prepared.temp_files = owned
    return prepared


def _remove_files(paths: list[Path]) -> None:
    for path in paths:
        path.unlink(missing_ok=True)


def dispose(credentials: SigningCredentials) -> None:
    """Delete every temp file owned by resolved credentials.

    Missing files count as already clean, so calling this twice is harmless.
    """
    _remove_files(credentials.temp_files)


def path_of(source: object) -> Path:
    """Return the path behind a FilePath source.

    Raises:
        InvalidCredentialSource: For InlineContent or anything that is not a FilePath
    """
    if isinstance(source, FilePath):
        return source.path
    raise InvalidCredentialSource(source)


@contextmanager
def resolved(
    credentials: SigningCredentials, temp_dir: Path | None = None
) -> Iterator[SigningCredentials]:
    """Resolve credentials for the duration of a block, disposing on every exit."""
    prepared = resolve(credentials, temp_dir)
    try:
        yield prepared
    finally:
        dispose(prepared)
        LOGGER.info("Disposed %d credential temp file(s)", len(prepared.temp_files))

"""Pass packager: turns a pass document plus assets into a signed .pkpass archive."""

import json
import secrets
import shutil
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .archive import assemble
from .config import PackagingConfig
from .credentials import SigningCredentials, path_of, resolved
from .errors import FileReadError, FileWriteError, PackagingError, Stage
from .logging_config import LOGGER
from .manifest import compute_manifest, serialize_manifest
from .models import PackagingResult
from .signer import Signer, build_signer

PASS_JSON = "pass.json"
MANIFEST_JSON = "manifest.json"
SIGNATURE = "signature"
RESERVED_NAMES = frozenset({PASS_JSON, MANIFEST_JSON, SIGNATURE})

PassDocument = bytes | str | Mapping[str, Any]
Assets = Mapping[str, Path | str] | Iterable[tuple[str, Path | str]]


def random_token() -> str:
    """Return a 128-bit hex token from the OS CSPRNG."""
    return secrets.token_hex(16)


def encode_pass_document(pass_document: PassDocument) -> bytes:
    """Return the bytes written verbatim as pass.json.

    Raises:
        TypeError: If the document is not bytes, str or a mapping
    """
    if isinstance(pass_document, bytes):
        return pass_document
    if isinstance(pass_document, str):
        return pass_document.encode("utf-8")
    if isinstance(pass_document, Mapping):
        return json.dumps(pass_document).encode("utf-8")
    raise TypeError(
        f"pass document must be bytes, str or mapping, got {type(pass_document).__name__}"
    )


def normalize_assets(assets: Assets) -> list[tuple[str, Path]]:
    """Return assets as an ordered list of (declared_name, source_path).

    Raises:
        FileWriteError: If a declared name is not a plain file name or is reserved
    """
    items = assets.items() if isinstance(assets, Mapping) else assets
    normalized = []
    for name, source in items:
        name = str(name)
        if not name or name in {".", ".."} or Path(name).name != name or "\\" in name:
            raise FileWriteError(
                name,
                ValueError("asset name must be a plain file name"),
                stage=Stage.COPY_ASSETS,
            )
        if name in RESERVED_NAMES:
            raise FileWriteError(
                name,
                ValueError(f"asset name {name!r} is reserved"),
                stage=Stage.COPY_ASSETS,
            )
        normalized.append((name, Path(source)))
    return normalized


class PassPackager:
    """Runs the packaging pipeline.

    Stages run in order and the first failure stops the run: resolve
    credentials, write pass.json, write manifest.json, sign, copy assets,
    archive, then optionally remove the staging directory. Credential temp
    files are disposed exactly once on every exit path.
    """

    def __init__(self, config: PackagingConfig | None = None, signer: Signer | None = None) -> None:
        """Initialize packager.

        Args:
            config: Output location and cleanup options
            signer: Signature engine (default: built from config.signer and
                config.signing_timeout)
        """
        self.config = config or PackagingConfig()
        self.signer = signer or build_signer(self.config.signer, self.config.signing_timeout)

    def generate(
        self,
        pass_document: PassDocument,
        assets: Assets,
        credentials: SigningCredentials,
    ) -> PackagingResult:
        """Build a signed archive from a pass document and asset files.

        Args:
            pass_document: Serialized pass JSON (bytes or str) or a mapping to serialize
            assets: (declared_name, source_path) pairs; names become archive entry names
            credentials: WWDR certificate, signer certificate, key and key password

        Returns:
            PackagingResult with the archive path and the manifest that was signed

        Raises:
            PackagingError: Subclass naming the failing stage; no archive is left behind
        """
        document = encode_pass_document(pass_document)
        asset_entries = normalize_assets(assets)

        pass_name = self.config.pass_name or random_token()
        output_dir = Path(self.config.output_dir)
        archive_path = output_dir / f"{pass_name}{self.config.archive_extension}"
        staging_dir = output_dir / random_token()

        stage = Stage.RESOLVE_CREDENTIALS
        archive_started = False
        succeeded = False
        try:
            with resolved(credentials) as prepared:
                LOGGER.info("Credentials resolved for pass %s", pass_name)

                stage = Stage.WRITE_DOCUMENT
                self._make_staging_dir(staging_dir)
                pass_json_path = self._write_staged(staging_dir / PASS_JSON, document)

                stage = Stage.WRITE_MANIFEST
                manifest = compute_manifest([(PASS_JSON, pass_json_path), *asset_entries])
                manifest_path = self._write_staged(
                    staging_dir / MANIFEST_JSON, serialize_manifest(manifest)
                )
                LOGGER.info("Manifest written with %d entries", len(manifest))

                stage = Stage.SIGN
                self.signer.sign(
                    manifest_path,
                    staging_dir / SIGNATURE,
                    path_of(prepared.certificate),
                    path_of(prepared.private_key),
                    path_of(prepared.wwdr),
                    prepared.key_password,
                )
                LOGGER.info("Manifest signed")

                stage = Stage.COPY_ASSETS
                self._copy_assets(staging_dir, asset_entries)

                stage = Stage.ARCHIVE
                archive_started = True
                output_dir.mkdir(parents=True, exist_ok=True)
                assemble(staging_dir, archive_path)
                LOGGER.info("Archive created: %s", archive_path)
            succeeded = True
        except PackagingError as e:
            if e.stage is None:
                e.stage = stage
            LOGGER.error(
                "Pass packaging failed at %s: %s",
                e.stage.value,
                e.diagnostic,
                extra={"stage": e.stage.value},
            )
            raise
        finally:
            if not succeeded:
                self._discard(staging_dir, archive_path if archive_started else None)

        kept_staging: Path | None = staging_dir
        if self.config.delete_staged_files:
            kept_staging = None
            self._remove_staging(staging_dir)

        return PackagingResult(
            archive_path=archive_path,
            pass_name=pass_name,
            manifest=manifest,
            staging_dir=kept_staging,
        )

    @staticmethod
    def _make_staging_dir(staging_dir: Path) -> None:
        try:
            staging_dir.mkdir(parents=True)
        except OSError as e:
            raise FileWriteError(staging_dir, e) from e

    @staticmethod
    def _write_staged(path: Path, content: bytes) -> Path:
        try:
            path.write_bytes(content)
        except OSError as e:
            raise FileWriteError(path, e) from e
        return path

    @staticmethod
    def _copy_assets(staging_dir: Path, assets: list[tuple[str, Path]]) -> None:
        """Copy assets under their declared names; a repeated name keeps the last copy."""
        for name, source in assets:
            target = staging_dir / name
            try:
                shutil.copyfile(source, target)
            except FileNotFoundError as e:
                raise FileReadError(name, source, e, stage=Stage.COPY_ASSETS) from e
            except OSError as e:
                raise FileWriteError(target, e, stage=Stage.COPY_ASSETS) from e

    @staticmethod
    def _remove_staging(staging_dir: Path) -> None:
        try:
            shutil.rmtree(staging_dir)
        except OSError as e:
            LOGGER.warning("Could not remove staging directory %s: %s", staging_dir, e)

    @staticmethod
    def _discard(staging_dir: Path, archive_path: Path | None) -> None:
        """Remove everything a failed run staged, including any partial archive."""
        shutil.rmtree(staging_dir, ignore_errors=True)
        if archive_path is not None:
            archive_path.unlink(missing_ok=True)


def generate(
    pass_document: PassDocument,
    assets: Assets,
    credentials: SigningCredentials,
    *,
    output_dir: Path | str | None = None,
    pass_name: str | None = None,
    delete_staged_files: bool = True,
    signer: Signer | None = None,
) -> Path:
    """Generate a signed .pkpass file and return its path.

    Options:
        output_dir: Where to write the archive (default: system temp dir)
        pass_name: Archive base name (default: random token)
        delete_staged_files: Remove the staged raw files, leaving only the archive
    """
    config = PackagingConfig(pass_name=pass_name, delete_staged_files=delete_staged_files)
    if output_dir is not None:
        config.output_dir = Path(output_dir)
    return PassPackager(config, signer).generate(pass_document, assets, credentials).archive_path

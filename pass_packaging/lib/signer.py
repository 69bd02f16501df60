"""Detached PKCS#7 signature engines for pass manifests.

Both engines produce a DER-encoded, detached, binary-mode signature over the
manifest file's exact bytes, with the signer certificate as leaf and the WWDR
certificate added to the signature's certificate set. A signing call that
reports success but leaves no bytes behind is still a failure.
"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.serialization import pkcs7

from .cert_utils import load_certificate, load_certificates, load_private_key
from .errors import FileWriteError, SigningFailure, Stage
from .logging_config import LOGGER

# Name of the child-process variable carrying the key password to openssl
PASSWORD_ENV_VAR = "PASS_PACKAGING_KEY_PASSWORD"


class Signer(Protocol):
    """Capability producing a detached signature file for a manifest."""

    def sign(
        self,
        manifest_path: Path,
        signature_path: Path,
        certificate_path: Path,
        key_path: Path,
        wwdr_path: Path,
        key_password: str | None = None,
    ) -> Path: ...


def _require_signature(signature_path: Path) -> Path:
    """Fail unless signature_path exists and is non-empty.

    An empty leftover file is removed so no partial signature survives.
    """
    try:
        size = signature_path.stat().st_size
    except FileNotFoundError:
        raise SigningFailure(f"signature file was not created: {signature_path}") from None

    if size == 0:
        signature_path.unlink(missing_ok=True)
        raise SigningFailure(f"signature file is empty: {signature_path}")

    return signature_path


class CryptographySigner:
    """Signs manifests in-process with the cryptography PKCS#7 builder."""

    def __init__(self, hash_algorithm: hashes.HashAlgorithm | None = None) -> None:
        self.hash_algorithm = hash_algorithm or hashes.SHA256()

    def sign(
        self,
        manifest_path: Path,
        signature_path: Path,
        certificate_path: Path,
        key_path: Path,
        wwdr_path: Path,
        key_password: str | None = None,
    ) -> Path:
        """Write a detached DER signature of manifest_path to signature_path.

        The signature file is only written once signing has succeeded.

        Raises:
            SigningFailure: If material cannot be loaded, the password is wrong,
                or signing yields no bytes
            FileWriteError: If the signature file cannot be written
        """
        try:
            data = Path(manifest_path).read_bytes()
            certificate = load_certificate(Path(certificate_path).read_bytes())
            private_key = load_private_key(Path(key_path).read_bytes(), key_password)
            chain = load_certificates(Path(wwdr_path).read_bytes())
        except (OSError, ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise SigningFailure(str(e)) from e

        builder = (
            pkcs7.PKCS7SignatureBuilder()
            .set_data(data)
            .add_signer(certificate, private_key, self.hash_algorithm)
        )
        for extra_cert in chain:
            builder = builder.add_certificate(extra_cert)

        try:
            signature = builder.sign(
                serialization.Encoding.DER,
                [pkcs7.PKCS7Options.DetachedSignature, pkcs7.PKCS7Options.Binary],
            )
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise SigningFailure(str(e)) from e

        if not signature:
            raise SigningFailure("signing produced no output")

        signature_path = Path(signature_path)
        try:
            signature_path.write_bytes(signature)
        except OSError as e:
            raise FileWriteError(signature_path, e, stage=Stage.SIGN) from e

        return _require_signature(signature_path)


class OpenSSLSigner:
    """Signs manifests with ``openssl smime`` in a subprocess.

    The key password reaches openssl through the child environment, never
    through argv, so it does not show up in process listings.
    """

    def __init__(self, openssl_path: str = "openssl", timeout: float = 30.0) -> None:
        self.openssl_path = openssl_path
        self.timeout = timeout

    @staticmethod
    def available(openssl_path: str = "openssl") -> bool:
        return shutil.which(openssl_path) is not None

    def build_command(
        self,
        manifest_path: Path,
        signature_path: Path,
        certificate_path: Path,
        key_path: Path,
        wwdr_path: Path,
    ) -> list[str]:
        return [
            self.openssl_path,
            "smime",
            "-sign",
            "-signer",
            str(certificate_path),
            "-inkey",
            str(key_path),
            "-certfile",
            str(wwdr_path),
            "-in",
            str(manifest_path),
            "-out",
            str(signature_path),
            "-outform",
            "der",
            "-binary",
            "-passin",
            f"env:{PASSWORD_ENV_VAR}",
        ]

    def sign(
        self,
        manifest_path: Path,
        signature_path: Path,
        certificate_path: Path,
        key_path: Path,
        wwdr_path: Path,
        key_password: str | None = None,
    ) -> Path:
        """Run openssl smime and check that it left a non-empty signature.

        Raises:
            SigningFailure: On non-zero exit (carrying openssl's stderr),
                timeout, missing binary, or empty output
        """
        signature_path = Path(signature_path)
        command = self.build_command(
            manifest_path, signature_path, certificate_path, key_path, wwdr_path
        )
        env = {**os.environ, PASSWORD_ENV_VAR: key_password or ""}

        try:
            completed = subprocess.run(
                command,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                env=env,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            signature_path.unlink(missing_ok=True)
            raise SigningFailure(f"timeout after {self.timeout}s") from e
        except OSError as e:
            raise SigningFailure(str(e)) from e

        if completed.returncode != 0:
            signature_path.unlink(missing_ok=True)
            diagnostic = completed.stderr.decode("utf-8", errors="replace")
            LOGGER.error("openssl exited with status %d", completed.returncode)
            raise SigningFailure(diagnostic or f"openssl exited with status {completed.returncode}")

        return _require_signature(signature_path)


SIGNER_KINDS = ("cryptography", "openssl")


def build_signer(kind: str = "cryptography", timeout: float = 30.0) -> Signer:
    """Return the signature engine named by kind.

    Args:
        kind: One of SIGNER_KINDS
        timeout: Seconds allowed for a subprocess signer; the in-process
            engine runs without one

    Raises:
        ValueError: If kind is not a known engine
    """
    if kind == "openssl":
        return OpenSSLSigner(timeout=timeout)
    if kind == "cryptography":
        return CryptographySigner()
    raise ValueError(f"unknown signer {kind!r}, expected one of {', '.join(SIGNER_KINDS)}")

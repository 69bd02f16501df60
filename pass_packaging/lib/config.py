"""Packaging configuration dataclasses."""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from cryptography import x509
from cryptography.x509 import oid

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _default_output_dir() -> Path:
    return Path(tempfile.gettempdir())


@dataclass
class PackagingConfig:
    """Caller-facing options for a packaging run.

    ``signer`` picks the default signature engine; ``signing_timeout`` bounds
    subprocess engines such as openssl.
    """

    output_dir: Path = field(default_factory=_default_output_dir)
    pass_name: str | None = None
    delete_staged_files: bool = True
    signer: str = "cryptography"
    signing_timeout: float = 30.0
    archive_extension: str = ".pkpass"

    @classmethod
    def from_env(cls) -> "PackagingConfig":
        """Build config from PASS_* environment variables.

        Reads PASS_OUTPUT_DIR, PASS_NAME, PASS_DELETE_STAGED_FILES, PASS_SIGNER
        and PASS_SIGNING_TIMEOUT; unset variables keep their defaults.

        Raises:
            ValueError: If a boolean or numeric variable cannot be parsed
        """
        config = cls()

        output_dir = os.environ.get("PASS_OUTPUT_DIR")
        if output_dir:
            config.output_dir = Path(output_dir)

        pass_name = os.environ.get("PASS_NAME")
        if pass_name:
            config.pass_name = pass_name

        delete_staged = os.environ.get("PASS_DELETE_STAGED_FILES")
        if delete_staged is not None:
            value = delete_staged.strip().lower()
            if value in _TRUE_VALUES:
                config.delete_staged_files = True
            elif value in _FALSE_VALUES:
                config.delete_staged_files = False
            else:
                raise ValueError(
                    f"PASS_DELETE_STAGED_FILES must be a boolean, got {delete_staged!r}"
                )

        signer = os.environ.get("PASS_SIGNER")
        if signer:
            config.signer = signer.strip().lower()

        timeout = os.environ.get("PASS_SIGNING_TIMEOUT")
        if timeout:
            config.signing_timeout = float(timeout)

        return config


@dataclass
class DistinguishedName:
    """X.509 Subject Distinguished Name.

    ``user_id`` carries the pass type identifier on pass signing certificates.
    """

    country: str
    organization: str
    organizational_unit: str
    common_name: str
    user_id: str | None = None

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for certificate generation."""
        attributes = []
        if self.user_id is not None:
            attributes.append(x509.NameAttribute(oid.NameOID.USER_ID, self.user_id))
        attributes.extend(
            [
                x509.NameAttribute(oid.NameOID.COMMON_NAME, self.common_name),
                x509.NameAttribute(oid.NameOID.ORGANIZATIONAL_UNIT_NAME, self.organizational_unit),
                x509.NameAttribute(oid.NameOID.ORGANIZATION_NAME, self.organization),
                x509.NameAttribute(oid.NameOID.COUNTRY_NAME, self.country),
            ]
        )
        return x509.Name(attributes)


@dataclass
class FixtureConfig:
    """Identity and validity settings for generated signing fixtures."""

    country: str = "US"
    organization: str = "Test Org"
    team_identifier: str = "ABC123"
    pass_type_identifier: str = "pass.test"
    wwdr_common_name: str = "Apple Worldwide Developer Relations Certification Authority"
    validity_days: int = 365
    key_size: int = 2048

"""Fixture factory producing a throwaway pass signing chain and sample assets."""

from io import BytesIO
from pathlib import Path

from PIL import Image

from .cert_utils import (
    generate_private_key,
    serialize_certificate,
    serialize_private_key,
    validate_certificate_chain,
)
from .certificate_builder import CertificateBuilder
from .config import DistinguishedName, FixtureConfig
from .models import FixtureResult


def make_png(
    width: int = 48,
    height: int = 48,
    rgb: tuple[int, int, int] = (255, 255, 255),
) -> bytes:
    """Return a solid-color RGB PNG."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), color=rgb).save(buffer, format="PNG")
    return buffer.getvalue()


class FixtureFactory:
    """Writes signing fixtures the packaging pipeline can consume."""

    def __init__(self, config: FixtureConfig | None = None) -> None:
        """Initialize fixture factory.

        Args:
            config: Identity and validity settings (defaults suit tests)
        """
        self.config = config or FixtureConfig()

    def write_fixtures(self, output_dir: Path, password: str | None = "password") -> FixtureResult:
        """Generate WWDR and signer certificates, keys and an icon under output_dir.

        Generates:
            - wwdr.pem / wwdr_key.pem: self-signed issuing certificate and its key
            - cert.pem: pass type certificate issued by the WWDR certificate
            - key.pem: signer private key, encrypted when password is set
            - icon.png: 48x48 white PNG

        Args:
            output_dir: Directory for fixture files (created if missing)
            password: Signer key password; None writes an unencrypted key

        Returns:
            FixtureResult with file paths and identifiers

        Raises:
            ValueError: If the generated signer certificate fails chain validation
            OSError: If fixture files cannot be written
        """
        output_dir.mkdir(parents=True, exist_ok=True)

        wwdr_key = generate_private_key(self.config.key_size)
        wwdr_dn = DistinguishedName(
            country=self.config.country,
            organization="Apple Inc.",
            organizational_unit="Apple Worldwide Developer Relations",
            common_name=self.config.wwdr_common_name,
        )
        wwdr_cert = CertificateBuilder.build_wwdr_certificate(
            subject_dn=wwdr_dn,
            private_key=wwdr_key,
            validity_days=self.config.validity_days,
        )

        signer_key = generate_private_key(self.config.key_size)
        signer_dn = DistinguishedName(
            country=self.config.country,
            organization=self.config.organization,
            organizational_unit=self.config.team_identifier,
            common_name=f"Pass Type ID: {self.config.pass_type_identifier}",
            user_id=self.config.pass_type_identifier,
        )
        signer_cert = CertificateBuilder.build_pass_type_certificate(
            subject_dn=signer_dn,
            public_key_source=signer_key,
            issuer_cert=wwdr_cert,
            issuer_key=wwdr_key,
            validity_days=self.config.validity_days,
        )
        if not validate_certificate_chain(signer_cert, wwdr_cert):
            raise ValueError("signer certificate does not chain to the WWDR certificate")

        wwdr_cert_path = output_dir / "wwdr.pem"
        wwdr_key_path = output_dir / "wwdr_key.pem"
        cert_path = output_dir / "cert.pem"
        key_path = output_dir / "key.pem"
        icon_path = output_dir / "icon.png"

        wwdr_cert_path.write_bytes(serialize_certificate(wwdr_cert))
        wwdr_key_path.write_bytes(serialize_private_key(wwdr_key))
        cert_path.write_bytes(serialize_certificate(signer_cert))
        key_path.write_bytes(serialize_private_key(signer_key, password))
        icon_path.write_bytes(make_png())

        return FixtureResult(
            wwdr_cert_path=wwdr_cert_path,
            wwdr_key_path=wwdr_key_path,
            cert_path=cert_path,
            key_path=key_path,
            icon_path=icon_path,
            pass_type_identifier=self.config.pass_type_identifier,
            team_identifier=self.config.team_identifier,
        )

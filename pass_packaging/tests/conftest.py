"""Test fixtures for pass_packaging tests."""

import json
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from pass_packaging.lib.cert_utils import generate_private_key
from pass_packaging.lib.certificate_builder import CertificateBuilder
from pass_packaging.lib.config import DistinguishedName, FixtureConfig, PackagingConfig
from pass_packaging.lib.credentials import FilePath, InlineContent, SigningCredentials
from pass_packaging.lib.fixture_factory import FixtureFactory
from pass_packaging.lib.models import FixtureResult

KEY_PASSWORD = "password"


@pytest.fixture
def pass_document() -> bytes:
    """Return a serialized pass document."""
    return json.dumps(
        {
            "description": "Test Pass",
            "organizationName": "Test Org",
            "passTypeIdentifier": "pass.test",
            "serialNumber": "123",
            "teamIdentifier": "ABC123",
        },
        separators=(",", ":"),
    ).encode("utf-8")


@pytest.fixture(scope="session")
def signing_fixtures(tmp_path_factory: pytest.TempPathFactory) -> FixtureResult:
    """Write WWDR cert, signer cert, password-protected key and icon once per session."""
    return FixtureFactory(FixtureConfig(key_size=2048)).write_fixtures(
        tmp_path_factory.mktemp("fixtures"), KEY_PASSWORD
    )


@pytest.fixture(scope="session")
def unencrypted_fixtures(tmp_path_factory: pytest.TempPathFactory) -> FixtureResult:
    """Same chain layout with an unencrypted signer key."""
    return FixtureFactory(FixtureConfig(key_size=2048)).write_fixtures(
        tmp_path_factory.mktemp("fixtures-plain"), None
    )


@pytest.fixture
def file_credentials(signing_fixtures: FixtureResult) -> SigningCredentials:
    """Return credentials backed by the fixture files."""
    return SigningCredentials(
        wwdr=FilePath(signing_fixtures.wwdr_cert_path),
        certificate=FilePath(signing_fixtures.cert_path),
        private_key=FilePath(signing_fixtures.key_path),
        key_password=KEY_PASSWORD,
    )


@pytest.fixture
def inline_credentials(signing_fixtures: FixtureResult) -> SigningCredentials:
    """Return credentials carrying the fixture PEM bytes inline."""
    return SigningCredentials(
        wwdr=InlineContent(signing_fixtures.wwdr_cert_path.read_bytes()),
        certificate=InlineContent(signing_fixtures.cert_path.read_bytes()),
        private_key=InlineContent(signing_fixtures.key_path.read_bytes()),
        key_password=KEY_PASSWORD,
    )


@pytest.fixture
def credential_temp_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the system temp dir at an isolated directory for credential temp files."""
    temp_dir = tmp_path / "system-tmp"
    temp_dir.mkdir()
    monkeypatch.setattr("tempfile.tempdir", str(temp_dir))
    return temp_dir


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Return directory receiving archives and staging directories."""
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def packaging_config(output_dir: Path) -> PackagingConfig:
    """Return packaging config writing into output_dir."""
    return PackagingConfig(output_dir=output_dir)


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    """Write a small manifest to sign."""
    path = tmp_path / "manifest.json"
    path.write_text('{"test": "manifest"}')
    return path


@pytest.fixture
def asset_files(tmp_path: Path, signing_fixtures: FixtureResult) -> list[tuple[str, Path]]:
    """Return (declared_name, path) pairs for a couple of assets."""
    assets_dir = tmp_path / "assets"
    assets_dir.mkdir()
    logo = assets_dir / "logo-source.png"
    logo.write_bytes(b"\x89PNG fake logo bytes")
    return [
        ("icon.png", signing_fixtures.icon_path),
        ("logo.png", logo),
    ]


@pytest.fixture
def issuer_key() -> RSAPrivateKey:
    """Generate RSA key for a standalone WWDR-style issuer."""
    return generate_private_key(key_size=2048)


@pytest.fixture
def issuer_cert(issuer_key: RSAPrivateKey) -> x509.Certificate:
    """Build standalone WWDR-style issuer certificate."""
    return CertificateBuilder.build_wwdr_certificate(
        subject_dn=DistinguishedName(
            country="US",
            organization="Apple Inc.",
            organizational_unit="Apple Worldwide Developer Relations",
            common_name="Test WWDR",
        ),
        private_key=issuer_key,
        validity_days=30,
    )

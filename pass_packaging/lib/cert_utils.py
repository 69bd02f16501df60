"""Certificate and key helpers for loading signing material and generating fixtures."""

import uuid

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

SigningKey = RSAPrivateKey | ec.EllipticCurvePrivateKey


def generate_private_key(key_size: int = 2048) -> RSAPrivateKey:
    """Generate RSA private key with specified size."""
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_size,
    )


def serialize_private_key(key: RSAPrivateKey, password: str | None = None) -> bytes:
    """Serialize private key to PKCS8 PEM, encrypted when a password is given."""
    if password:
        encryption: serialization.KeySerializationEncryption = (
            serialization.BestAvailableEncryption(password.encode("utf-8"))
        )
    else:
        encryption = serialization.NoEncryption()
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption,
    )


def load_private_key(pem_data: bytes, password: str | None = None) -> SigningKey:
    """Load a PEM private key usable for PKCS#7 signing.

    An empty or absent password means the key is unencrypted. A password
    supplied for an unencrypted key is ignored, as openssl does.

    Raises:
        ValueError: If the key is malformed or the password is wrong
        TypeError: If the key is encrypted and no password is given
    """
    secret = password.encode("utf-8") if password else None
    try:
        key = serialization.load_pem_private_key(pem_data, password=secret)
    except TypeError:
        if secret is None:
            raise
        key = serialization.load_pem_private_key(pem_data, password=None)
    if not isinstance(key, (RSAPrivateKey, ec.EllipticCurvePrivateKey)):
        raise ValueError("expected RSA or EC private key")
    return key


def serialize_certificate(cert: x509.Certificate) -> bytes:
    """Serialize certificate to PEM format."""
    return cert.public_bytes(serialization.Encoding.PEM)


def load_certificate(pem_data: bytes) -> x509.Certificate:
    """Load the first certificate from PEM bytes."""
    return x509.load_pem_x509_certificate(pem_data)


def load_certificates(pem_data: bytes) -> list[x509.Certificate]:
    """Load every certificate from a PEM bundle.

    Raises:
        ValueError: If the bundle holds no certificate
    """
    return x509.load_pem_x509_certificates(pem_data)


def generate_serial_number() -> int:
    """Generate certificate serial number from UUID4 (128-bit, ~122 bits of entropy)."""
    return uuid.uuid4().int


def validate_certificate_chain(
    signer_cert: x509.Certificate,
    issuer_cert: x509.Certificate,
) -> bool:
    """Return True if signer_cert was directly issued by issuer_cert."""
    try:
        signer_cert.verify_directly_issued_by(issuer_cert)
        return True
    except (ValueError, TypeError, InvalidSignature):
        return False

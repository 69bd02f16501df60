"""Certificate builder for pass signing chains used in fixtures and local testing."""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from .cert_utils import generate_serial_number
from .config import DistinguishedName

_KEY_USAGE_FLAGS = (
    "digital_signature",
    "content_commitment",
    "key_encipherment",
    "data_encipherment",
    "key_agreement",
    "key_cert_sign",
    "crl_sign",
    "encipher_only",
    "decipher_only",
)


def _key_usage(*enabled: str) -> x509.KeyUsage:
    """Return a KeyUsage extension with only the named flags set."""
    return x509.KeyUsage(**{flag: flag in enabled for flag in _KEY_USAGE_FLAGS})


def _base_builder(
    subject: x509.Name,
    issuer: x509.Name,
    public_key: RSAPublicKey,
    validity_days: int,
) -> x509.CertificateBuilder:
    not_before = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(public_key)
        .serial_number(generate_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_before + timedelta(days=validity_days))
    )


class CertificateBuilder:
    """Builds X.509 certificates for a WWDR-style issuer and pass type signers."""

    @staticmethod
    def build_wwdr_certificate(
        subject_dn: DistinguishedName,
        private_key: RSAPrivateKey,
        validity_days: int,
    ) -> x509.Certificate:
        """Build self-signed issuing certificate standing in for Apple WWDR.

        Args:
            subject_dn: Distinguished name for certificate subject
            private_key: RSA private key for signing
            validity_days: Certificate validity period in days

        Returns:
            Self-signed X.509 certificate allowed to issue pass type certificates
        """
        subject = subject_dn.to_x509_name()
        builder = (
            _base_builder(subject, subject, private_key.public_key(), validity_days)
            .add_extension(x509.BasicConstraints(ca=True, path_length=0), critical=True)
            .add_extension(_key_usage("key_cert_sign", "crl_sign"), critical=True)
        )
        return builder.sign(private_key, hashes.SHA256())

    @staticmethod
    def build_pass_type_certificate(
        subject_dn: DistinguishedName,
        public_key_source: RSAPrivateKey,
        issuer_cert: x509.Certificate,
        issuer_key: RSAPrivateKey,
        validity_days: int,
    ) -> x509.Certificate:
        """Build pass type ID signing certificate issued by the WWDR certificate.

        Args:
            subject_dn: Subject DN; user_id carries the pass type identifier
            public_key_source: Signer private key whose public half is certified
            issuer_cert: WWDR certificate (issuer)
            issuer_key: WWDR private key for signing
            validity_days: Certificate validity period in days

        Returns:
            X.509 end-entity certificate usable for S/MIME signing
        """
        builder = (
            _base_builder(
                subject_dn.to_x509_name(),
                issuer_cert.subject,
                public_key_source.public_key(),
                validity_days,
            )
            .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
            .add_extension(_key_usage("digital_signature"), critical=True)
            .add_extension(
                x509.ExtendedKeyUsage([x509.oid.ExtendedKeyUsageOID.EMAIL_PROTECTION]),
                critical=False,
            )
        )
        return builder.sign(issuer_key, hashes.SHA256())

"""Certificate-based encryption of settings files.

Secure settings files (``<Key>.json.secure``) hold an envelope: a random
AES-256-GCM data key encrypts the JSON document and is itself wrapped with
the RSA public key of a certificate using OAEP/SHA-256. The envelope is a
base64-encoded JSON object::

    {"v": 1, "alg": "RSA-OAEP-256+A256GCM", "kid": "<sha1 thumbprint>",
     "key": "<wrapped data key>", "iv": "<nonce>", "ct": "<ciphertext>"}

Decryption tries the certificate whose thumbprint matches ``kid`` first and
then every other certificate that carries a private key.
"""

import base64
import binascii
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from cryptography import x509
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.serialization import pkcs12

from settingsflow.common.exceptions import (
    SettingsFlowError,
    certificate_error,
    decryption_error,
)
from settingsflow.logging import get_logger

logger = get_logger(__name__)

ENVELOPE_VERSION = 1
ENVELOPE_ALGORITHM = "RSA-OAEP-256+A256GCM"
CERTIFICATE_EXTENSIONS = (".pem", ".crt", ".cer", ".der", ".pfx", ".p12")

PasswordCallback = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class CertificateEntry:
    """A loaded certificate and, when available, its private key."""

    certificate: x509.Certificate
    private_key: Optional[rsa.RSAPrivateKey]
    path: Optional[str] = None

    @property
    def thumbprint(self) -> str:
        return self.certificate.fingerprint(hashes.SHA1()).hex().upper()

    @property
    def has_private_key(self) -> bool:
        return self.private_key is not None


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def _password_bytes(password: Optional[str]) -> Optional[bytes]:
    return password.encode("utf-8") if password else None


def load_certificate_file(path: Union[str, Path], password: Optional[str] = None) -> CertificateEntry:
    """Load a certificate (and private key, when present) from a file.

    PKCS#12 bundles (``.pfx``/``.p12``) are opened with ``password``. PEM
    files may contain the certificate and an unencrypted or password
    protected private key. Anything else is read as a DER certificate.

    Raises:
        SettingsFlowError: CERTIFICATE_ERROR if the file cannot be parsed
    """
    path = Path(path)
    try:
        data = path.read_bytes()
        suffix = path.suffix.lower()

        if suffix in (".pfx", ".p12"):
            key, cert, _ = pkcs12.load_key_and_certificates(data, _password_bytes(password))
            if cert is None:
                raise ValueError("PKCS#12 bundle contains no certificate")
            return CertificateEntry(cert, key if isinstance(key, rsa.RSAPrivateKey) else None, str(path))

        if b"-----BEGIN" in data:
            cert = x509.load_pem_x509_certificate(data)
            key = None
            if b"PRIVATE KEY-----" in data:
                try:
                    key = serialization.load_pem_private_key(data, _password_bytes(password))
                except TypeError:
                    # key is not encrypted
                    if not password:
                        raise
                    key = serialization.load_pem_private_key(data, None)
            return CertificateEntry(cert, key if isinstance(key, rsa.RSAPrivateKey) else None, str(path))

        return CertificateEntry(x509.load_der_x509_certificate(data), None, str(path))
    except (ValueError, TypeError, OSError) as e:
        raise certificate_error(f"Unable to load certificate from {path}", path=str(path), cause=e) from e


def load_certificates(
    paths: Iterable[Union[str, Path]],
    password: Optional[PasswordCallback] = None,
) -> List[CertificateEntry]:
    """Load the certificate files among ``paths``, skipping other files.

    Files that fail to load are logged and skipped.
    """
    entries = []
    for path in map(Path, paths):
        if path.suffix.lower() not in CERTIFICATE_EXTENSIONS:
            continue
        try:
            entries.append(load_certificate_file(path, password(path.name) if password else None))
        except SettingsFlowError as e:
            logger.warning(f"Skipping certificate {path}: {e}")
    return entries


def certificates_from_directory(
    directory: Union[str, Path],
    password: Optional[PasswordCallback] = None,
) -> List[CertificateEntry]:
    """Load every certificate file directly inside ``directory``.

    A missing directory yields no certificates.

    Args:
        directory: Folder to scan (not recursive)
        password: Callback returning the password for a given file name
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    files = sorted((p for p in directory.iterdir() if p.is_file()), key=lambda p: p.name.lower())
    return load_certificates(files, password)


def certificates_from_store(
    store_directory: Optional[Union[str, Path]] = None,
    password: Optional[PasswordCallback] = None,
) -> List[CertificateEntry]:
    """Load the certificates of the platform certificate store.

    The store is a plain folder, ``SETTINGSFLOW_CERTIFICATE_STORE`` by
    default.
    """
    if store_directory is None:
        from settingsflow.config import get_library_settings
        store_directory = get_library_settings().certificate_store
    return certificates_from_directory(store_directory, password)


def encrypt(plaintext: Union[str, bytes], certificate: CertificateEntry) -> str:
    """Encrypt ``plaintext`` for the holder of ``certificate``'s private key.

    Returns:
        The base64 envelope, suitable for writing to a ``.secure`` file

    Raises:
        SettingsFlowError: CERTIFICATE_ERROR if the certificate has no RSA public key
    """
    public_key = certificate.certificate.public_key()
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise certificate_error(
            "Only RSA certificates can be used to encrypt settings",
            path=certificate.path,
        )

    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")

    data_key = AESGCM.generate_key(bit_length=256)
    nonce = os.urandom(12)
    ciphertext = AESGCM(data_key).encrypt(nonce, plaintext, None)
    wrapped_key = public_key.encrypt(data_key, _oaep())

    envelope = {
        "v": ENVELOPE_VERSION,
        "alg": ENVELOPE_ALGORITHM,
        "kid": certificate.thumbprint,
        "key": base64.b64encode(wrapped_key).decode("ascii"),
        "iv": base64.b64encode(nonce).decode("ascii"),
        "ct": base64.b64encode(ciphertext).decode("ascii"),
    }
    return base64.b64encode(json.dumps(envelope).encode("utf-8")).decode("ascii")


def _parse_envelope(ciphertext: str) -> dict:
    try:
        envelope = json.loads(base64.b64decode(ciphertext.strip(), validate=True))
        if envelope.get("v") != ENVELOPE_VERSION or envelope.get("alg") != ENVELOPE_ALGORITHM:
            raise ValueError(f"Unsupported envelope {envelope.get('alg')!r} version {envelope.get('v')!r}")
        return {
            "kid": envelope.get("kid"),
            "key": base64.b64decode(envelope["key"]),
            "iv": base64.b64decode(envelope["iv"]),
            "ct": base64.b64decode(envelope["ct"]),
        }
    except (binascii.Error, ValueError, KeyError, TypeError, AttributeError) as e:
        raise decryption_error("Encrypted setting is not a valid envelope", cause=e) from e


def decrypt(ciphertext: str, certificates: Iterable[CertificateEntry]) -> str:
    """Decrypt an envelope produced by :func:`encrypt`.

    Args:
        ciphertext: Base64 envelope
        certificates: Candidate certificates; only those with private keys are tried

    Returns:
        The decrypted UTF-8 text

    Raises:
        SettingsFlowError: DECRYPTION_ERROR if the envelope is corrupt or no
            certificate can unwrap the data key
    """
    envelope = _parse_envelope(ciphertext)

    candidates = [entry for entry in certificates if entry.has_private_key]
    candidates.sort(key=lambda entry: entry.thumbprint != envelope["kid"])
    if not candidates:
        raise decryption_error("No certificate with a private key is available to decrypt the setting")

    last_error: Optional[Exception] = None
    for entry in candidates:
        try:
            data_key = entry.private_key.decrypt(envelope["key"], _oaep())
            plaintext = AESGCM(data_key).decrypt(envelope["iv"], envelope["ct"], None)
            return plaintext.decode("utf-8")
        except (ValueError, InvalidTag) as e:
            last_error = e

    raise decryption_error(
        f"None of {len(candidates)} available certificate(s) could decrypt the setting",
        cause=last_error,
    )

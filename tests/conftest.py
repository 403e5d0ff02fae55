"""Shared fixtures: temporary settings folders, certificates and resolvers."""

import datetime
import json
from pathlib import Path
from typing import Optional

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID
from pydantic import BaseModel

from settingsflow.config import LibrarySettings
from settingsflow.crypto import CertificateEntry
from settingsflow.settings import PRECEDENCE_SETTING, SettingsResolver


class EnvironmentSettings(BaseModel):
    Name: str = ""
    IsLocal: bool = False
    IsTest: bool = False


def write_json(path: Path, document) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def make_certificate(
    directory: Optional[Path] = None,
    name: str = "settings.pem",
    password: Optional[str] = None,
    common_name: str = "settingsflow-tests",
) -> CertificateEntry:
    """Create a self-signed RSA certificate, optionally written to ``directory``.

    ``.pem`` files hold the certificate and the private key, ``.pfx``/``.p12``
    files a PKCS#12 bundle, and ``.cer`` files only the DER certificate.
    """
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .sign(key, hashes.SHA256())
    )

    path = None
    if directory is not None:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        suffix = path.suffix.lower()
        if suffix in (".pfx", ".p12"):
            encryption = (
                serialization.BestAvailableEncryption(password.encode())
                if password else serialization.NoEncryption()
            )
            path.write_bytes(
                pkcs12.serialize_key_and_certificates(
                    common_name.encode(), key, certificate, None, encryption
                )
            )
        elif suffix == ".cer":
            path.write_bytes(certificate.public_bytes(serialization.Encoding.DER))
        else:
            encryption = (
                serialization.BestAvailableEncryption(password.encode())
                if password else serialization.NoEncryption()
            )
            path.write_bytes(
                certificate.public_bytes(serialization.Encoding.PEM)
                + key.private_bytes(
                    serialization.Encoding.PEM,
                    serialization.PrivateFormat.PKCS8,
                    encryption,
                )
            )

    return CertificateEntry(certificate, key, str(path) if path else None)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's environment out of resolution."""
    for variable in (
        PRECEDENCE_SETTING,
        "Its.Configuration.Precedence",
        "precedence",
        "EnvironmentSettings",
        "KEYVAULT_URL",
    ):
        monkeypatch.delenv(variable, raising=False)


@pytest.fixture
def settings_directory(tmp_path) -> Path:
    """A ``.config`` tree with root, ``test`` and ``production`` folders."""
    root = tmp_path / ".config"
    write_json(root / "EnvironmentSettings.json", {"Name": "local", "IsLocal": True, "IsTest": False})
    write_json(root / "test" / "EnvironmentSettings.json", {"Name": "test", "IsLocal": False, "IsTest": True})
    write_json(root / "production" / "EnvironmentSettings.json", {"Name": "production", "IsLocal": False, "IsTest": False})
    return root


@pytest.fixture
def certificate_store(tmp_path) -> Path:
    store = tmp_path / "certificates"
    store.mkdir()
    return store


@pytest.fixture
def app_config_file(tmp_path) -> Path:
    return tmp_path / "app.env"


@pytest.fixture
def library_settings(settings_directory, certificate_store, app_config_file) -> LibrarySettings:
    return LibrarySettings(
        settings_directory=str(settings_directory),
        certificate_store=str(certificate_store),
        app_config_file=str(app_config_file),
    )


@pytest.fixture
def resolver(library_settings) -> SettingsResolver:
    return SettingsResolver(library_settings)

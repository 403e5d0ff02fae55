"""Tests for certificate loading and settings encryption."""

import base64
import json
from pathlib import Path

import pytest

from conftest import make_certificate
from settingsflow.common.exceptions import ErrorCode, SettingsFlowError
from settingsflow.crypto import (
    CertificateEntry,
    certificates_from_directory,
    certificates_from_store,
    decrypt,
    encrypt,
    load_certificate_file,
)


@pytest.fixture(scope="module")
def certificate():
    return make_certificate()


class TestEncryptDecrypt:

    def test_round_trip(self, certificate):
        """Test round trip."""
        plaintext = '{"ConnectionString": "Server=db;Password=s3cret"}'

        ciphertext = encrypt(plaintext, certificate)

        assert plaintext not in ciphertext
        assert decrypt(ciphertext, [certificate]) == plaintext

    def test_decrypts_with_any_certificate_in_the_set(self, certificate):
        """Test decrypts with any certificate in the set."""
        other = make_certificate(common_name="other")
        ciphertext = encrypt("hello", certificate)

        assert decrypt(ciphertext, [other, certificate]) == "hello"

    def test_envelope_names_the_certificate(self, certificate):
        """Test envelope names the certificate."""
        envelope = json.loads(base64.b64decode(encrypt("hello", certificate)))

        assert envelope["kid"] == certificate.thumbprint
        assert envelope["alg"] == "RSA-OAEP-256+A256GCM"

    def test_wrong_certificate_fails(self, certificate):
        """Test wrong certificate fails."""
        other = make_certificate(common_name="other")
        ciphertext = encrypt("hello", certificate)

        with pytest.raises(SettingsFlowError) as exc_info:
            decrypt(ciphertext, [other])

        assert exc_info.value.error_code is ErrorCode.DECRYPTION_ERROR

    def test_certificate_without_private_key_cannot_decrypt(self, certificate):
        """Test certificate without private key cannot decrypt."""
        public_only = CertificateEntry(certificate.certificate, None)
        ciphertext = encrypt("hello", public_only)

        with pytest.raises(SettingsFlowError, match="No certificate with a private key"):
            decrypt(ciphertext, [public_only])

    def test_corrupt_envelope_fails(self, certificate):
        """Test corrupt envelope fails."""
        with pytest.raises(SettingsFlowError) as exc_info:
            decrypt("this is not an envelope", [certificate])

        assert exc_info.value.error_code is ErrorCode.DECRYPTION_ERROR


class TestCertificateLoading:

    def test_loads_pem_with_private_key(self, tmp_path):
        """Test loads PEM with private key."""
        created = make_certificate(tmp_path, "cert.pem")

        loaded = load_certificate_file(tmp_path / "cert.pem")

        assert loaded.has_private_key
        assert loaded.thumbprint == created.thumbprint

    def test_loads_password_protected_pfx(self, tmp_path):
        """Test loads password-protected PFX."""
        make_certificate(tmp_path, "cert.pfx", password="pfx-password")

        loaded = load_certificate_file(tmp_path / "cert.pfx", "pfx-password")

        assert loaded.has_private_key

    def test_wrong_pfx_password_is_a_certificate_error(self, tmp_path):
        """Test wrong PFX password is a certificate error."""
        make_certificate(tmp_path, "cert.pfx", password="pfx-password")

        with pytest.raises(SettingsFlowError) as exc_info:
            load_certificate_file(tmp_path / "cert.pfx", "wrong")

        assert exc_info.value.error_code is ErrorCode.CERTIFICATE_ERROR

    def test_der_certificate_has_no_private_key(self, tmp_path):
        """Test DER certificate has no private key."""
        make_certificate(tmp_path, "public.cer")

        assert not load_certificate_file(tmp_path / "public.cer").has_private_key

    def test_directory_scan_skips_unreadable_files(self, tmp_path):
        """Test directory scan skips unreadable files."""
        make_certificate(tmp_path, "a.pem")
        make_certificate(tmp_path, "b.pfx", password="secret")
        (tmp_path / "broken.pem").write_text("-----BEGIN CERTIFICATE-----\nnope\n", encoding="utf-8")
        (tmp_path / "Settings.json").write_text("{}", encoding="utf-8")

        entries = certificates_from_directory(tmp_path, password=lambda name: "secret" if name == "b.pfx" else None)

        assert sorted(Path(entry.path).name for entry in entries) == ["a.pem", "b.pfx"]

    def test_missing_directory_has_no_certificates(self, tmp_path):
        """Test missing directory has no certificates."""
        assert certificates_from_directory(tmp_path / "missing") == []

    def test_store_defaults_to_library_settings(self, tmp_path, monkeypatch):
        """Test store defaults to library settings."""
        make_certificate(tmp_path, "store.pem")
        monkeypatch.setenv("SETTINGSFLOW_CERTIFICATE_STORE", str(tmp_path))

        from settingsflow.config import get_library_settings
        get_library_settings(force_reload=True)
        try:
            assert len(certificates_from_store()) == 1
        finally:
            monkeypatch.delenv("SETTINGSFLOW_CERTIFICATE_STORE")
            get_library_settings(force_reload=True)

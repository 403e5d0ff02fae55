"""Settings folder source.

A settings folder holds one file per settings key:

* ``<Key>.json`` contains the serialized settings in clear text.
* ``<Key>.json.secure`` contains the same document encrypted with
  ``settingsflow.crypto.encrypt``.

The folder is read once, when the source is created. Lookups are
case-insensitive.
"""

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, Union

from settingsflow.common.exceptions import (
    ErrorCode,
    SettingsFlowError,
    conflicting_settings_error,
    decryption_error,
)
from settingsflow.crypto import (
    CertificateEntry,
    PasswordCallback,
    certificates_from_directory,
    certificates_from_store,
    decrypt,
)
from settingsflow.logging import get_logger

logger = get_logger(__name__)

Decryptor = Callable[[str, Iterable[CertificateEntry]], str]
CertificateProvider = Callable[[], Iterable[CertificateEntry]]

JSON_EXTENSION = ".json"
SECURE_EXTENSION = ".secure"


class ConfigDirectorySource:
    """Provides settings from the ``.json`` and ``.secure`` files of one folder.

    Attributes:
        directory_path: Folder the settings were read from
        files: Every file found in the folder, sorted case-insensitively by name
    """

    def __init__(
        self,
        directory_path: Union[str, Path],
        certificates: Optional[CertificateProvider] = None,
        certificate_password: Optional[PasswordCallback] = None,
        decryptor: Decryptor = decrypt,
    ):
        """Read the settings files of ``directory_path``.

        Args:
            directory_path: Folder to read; a missing folder yields an empty source
            certificates: Returns the certificates used to decrypt secure settings.
                Defaults to the certificates in this folder plus the certificate store.
            certificate_password: Callback returning the password of a PKCS#12 file
            decryptor: Function decrypting a secure file's content

        Raises:
            SettingsFlowError: CONFIG_CONFLICT when two files map to the same key
        """
        self.directory_path = Path(directory_path)
        self.files: List[Path] = []
        self._file_contents: Dict[str, str] = {}
        self._file_paths: Dict[str, Path] = {}
        self._secure_keys: Set[str] = set()
        self._certificates = certificates
        self._certificate_password = certificate_password
        self._decryptor = decryptor

        self._read_files()

    @property
    def name(self) -> str:
        return f"settings folder ({self.directory_path})"

    @property
    def secure_keys(self) -> Set[str]:
        return set(self._secure_keys)

    def _read_files(self) -> None:
        if not self.directory_path.is_dir():
            return

        entries = sorted(
            (path for path in self.directory_path.iterdir() if path.is_file()),
            key=lambda path: path.name.lower(),
        )

        for path in entries:
            self.files.append(path)
            extension = path.suffix.lower()

            if extension == JSON_EXTENSION:
                self._add(path.stem, path, secure=False)
            elif extension == SECURE_EXTENSION:
                key = path.stem
                if key.lower().endswith(JSON_EXTENSION):
                    key = key[:-len(JSON_EXTENSION)]
                self._add(key, path, secure=True)

        logger.debug(
            f"Read {len(self._file_contents)} settings files from {self.directory_path}"
        )

    def _add(self, key: str, path: Path, secure: bool) -> None:
        lookup = key.lower()
        if lookup in self._file_contents:
            raise conflicting_settings_error(str(path.resolve()), key)

        self._file_contents[lookup] = path.read_text(encoding="utf-8-sig")
        self._file_paths[lookup] = path
        if secure:
            self._secure_keys.add(lookup)

    def _available_certificates(self) -> List[CertificateEntry]:
        if self._certificates is not None:
            return list(self._certificates())
        return (
            certificates_from_directory(self.directory_path, self._certificate_password)
            + certificates_from_store(password=self._certificate_password)
        )

    def get_serialized_setting(self, key: str) -> Optional[str]:
        """Return the content of the file for ``key``, decrypting secure files.

        Raises:
            SettingsFlowError: DECRYPTION_ERROR naming the file if a secure
                setting cannot be decrypted
        """
        lookup = key.lower()
        value = self._file_contents.get(lookup)
        if value is None:
            return None

        if lookup not in self._secure_keys:
            return value

        path = self._file_paths[lookup]
        try:
            return self._decryptor(value, self._available_certificates())
        except SettingsFlowError as e:
            if e.error_code is ErrorCode.DECRYPTION_ERROR:
                raise decryption_error(e.message, path=str(path), cause=e.cause or e) from e
            raise
        except ValueError as e:
            raise decryption_error(f"Unable to decrypt setting '{key}'", path=str(path), cause=e) from e

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._file_contents

    def __repr__(self) -> str:
        return f"ConfigDirectorySource({str(self.directory_path)!r})"

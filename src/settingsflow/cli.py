"""Command-line interface for encrypting and decrypting settings.

    settingsflow encrypt -t '{"password": "s3cret"}' -c cert.pem > .config/Db.json.secure
    settingsflow decrypt -f .config/Db.json.secure -c cert.pfx -p pfx-password

Every failure, including invalid arguments, exits with status 1.
"""

from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from settingsflow.common.exceptions import SettingsFlowError
from settingsflow.config import get_library_settings
from settingsflow.crypto import decrypt as decrypt_text
from settingsflow.crypto import encrypt as encrypt_text
from settingsflow.crypto import load_certificate_file
from settingsflow.logging import setup_logging

app = typer.Typer(
    name="settingsflow",
    help="settingsflow utility console: encrypt and decrypt settings files",
    add_completion=False,
    no_args_is_help=True,
)

FileOption = Annotated[
    Optional[Path],
    typer.Option("--file", "-f", help="Specifies the file to execute the command against."),
]
TextOption = Annotated[
    Optional[str],
    typer.Option("--text", "-t", help="Specifies the text to execute the command against."),
]
CertificateOption = Annotated[
    Path,
    typer.Option(
        "--certificate",
        "-c",
        help="Specifies the file path of a certificate to use for encryption or decryption.",
    ),
]
PasswordOption = Annotated[
    Optional[str],
    typer.Option("--password", "-p", help="Specifies the password for the certificate."),
]


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _input_text(file: Optional[Path], text: Optional[str]) -> str:
    has_file = file is not None and str(file).strip()
    has_text = text is not None and text.strip()

    if has_file and has_text:
        _fail("You cannot specify both the --file and --text options.")
    if not has_file and not has_text:
        _fail("You must specify either the --file or --text option.")

    if has_file:
        return file.read_text(encoding="utf-8-sig")
    return text


@app.callback()
def callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Write debug JSON logs to stderr."),
    ] = False,
) -> None:
    """Configure logging before running a command."""
    if verbose:
        setup_logging("DEBUG")
    else:
        setup_logging(get_library_settings().log_level)


@app.command()
def encrypt(
    certificate: CertificateOption,
    file: FileOption = None,
    text: TextOption = None,
    password: PasswordOption = None,
) -> None:
    """Encrypt text for the holder of the certificate's private key."""
    try:
        plaintext = _input_text(file, text)
        entry = load_certificate_file(certificate, password)
        result = encrypt_text(plaintext, entry)
    except (SettingsFlowError, OSError) as e:
        _fail(str(e))
    typer.secho(result, fg=typer.colors.GREEN)


@app.command()
def decrypt(
    certificate: CertificateOption,
    file: FileOption = None,
    text: TextOption = None,
    password: PasswordOption = None,
) -> None:
    """Decrypt text with the certificate's private key."""
    try:
        ciphertext = _input_text(file, text)
        entry = load_certificate_file(certificate, password)
        result = decrypt_text(ciphertext, [entry])
    except (SettingsFlowError, OSError) as e:
        _fail(str(e))
    typer.secho(result, fg=typer.colors.GREEN)


def main() -> None:
    """Console script entry point. Maps every failure exit status to 1."""
    try:
        app()
    except SystemExit as e:
        if e.code not in (0, None):
            raise SystemExit(1) from e
        raise

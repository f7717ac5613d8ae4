import os
import logging
import subprocess
from pathlib import Path
from typing import Optional, Protocol

from sshproxy.core.config import Settings, settings as default_settings
from sshproxy.core.exceptions import ExternalToolFailedError, PersistenceFailedError
from sshproxy.schemas.keys import KeyBundle, KeyFiles

logger = logging.getLogger(__name__)

PRIVATE_KEY_MODE = 0o600
PUBLIC_FILE_MODE = 0o644
SSH_DIR_MODE = 0o700

UNKNOWN_VALIDITY = "Valid: unknown"


class KeyInspector(Protocol):
    def derive_public_key(self, private_key_path: Path) -> bytes: ...

    def get_validity(self, cert_path: Path) -> str: ...


class SshKeygen:
    """KeyInspector backed by the ssh-keygen binary."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        cmd = [self.settings.SSH_KEYGEN, *args]
        try:
            result = subprocess.run(cmd, capture_output=True, check=False)
        except OSError as e:
            raise ExternalToolFailedError(cmd, None, str(e)) from e
        if result.returncode != 0:
            raise ExternalToolFailedError(cmd, result.returncode, result.stderr.decode(errors="replace"))
        return result

    def derive_public_key(self, private_key_path: Path) -> bytes:
        return self._run("-y", "-f", str(private_key_path)).stdout

    def get_validity(self, cert_path: Path) -> str:
        output = self._run("-L", "-f", str(cert_path)).stdout.decode(errors="replace")
        for line in output.splitlines():
            if line.strip().startswith("Valid:"):
                return line.strip()
        return UNKNOWN_VALIDITY


def certificate_path(key_path: Path) -> Path:
    """~/.ssh/nersc -> ~/.ssh/nersc-cert.pub"""
    stem = Path(key_path).with_suffix("")
    return stem.with_name(f"{stem.name}-cert.pub")

def public_key_path(key_path: Path) -> Path:
    """~/.ssh/nersc -> ~/.ssh/nersc.pub"""
    return Path(key_path).with_suffix(".pub")


def write_private_key(path: Path, content: str) -> None:
    """
    Create the key file already restricted to 0600. The explicit fchmod covers
    a pre-existing file with a broader mode; it runs before any byte is written.
    """
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, PRIVATE_KEY_MODE)
    try:
        os.fchmod(fd, PRIVATE_KEY_MODE)
    except OSError:
        os.close(fd)
        raise
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)

def write_public_file(path: Path, content: bytes) -> None:
    with open(path, "wb") as f:
        f.write(content)
    os.chmod(path, PUBLIC_FILE_MODE)


def save_key_files(key_path: Path, bundle: KeyBundle, inspector: KeyInspector) -> KeyFiles:
    """
    Write private key, certificate and derived public key next to each other.
    A failure part way through can leave the private key behind.
    """
    key_path = Path(key_path)
    files = KeyFiles(
        private_key=key_path,
        certificate=certificate_path(key_path),
        public_key=public_key_path(key_path)
    )

    current = key_path.parent
    try:
        if not current.exists():
            current.mkdir(mode=SSH_DIR_MODE, parents=True)

        current = files.private_key
        write_private_key(files.private_key, bundle.content)

        current = files.certificate
        write_public_file(files.certificate, bundle.certificate.encode())
    except OSError as e:
        raise PersistenceFailedError(current, e) from e

    public_key = inspector.derive_public_key(files.private_key)
    try:
        write_public_file(files.public_key, public_key)
    except OSError as e:
        raise PersistenceFailedError(files.public_key, e) from e

    logger.info("Saved key files", extra={"private_key": str(files.private_key)})
    return files

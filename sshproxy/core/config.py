from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SSHPROXY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Issuance service
    BASE_URL: str = "https://sshproxy.nersc.gov"
    SCOPE: str = "default"
    REQUEST_TIMEOUT: Optional[float] = None  # None blocks until the server answers
    AUTH_FAILURE_MARKER: str = "Authentication failed"

    # Keychain
    SERVICE_NAME: str = "NERSC"
    OTP_SERVICE_SUFFIX: str = "_SECRET"

    # Key material
    KEY_NAME: str = "nersc"
    SSH_DIR: Optional[Path] = None  # defaults to ~/.ssh
    SSH_KEYGEN: str = "ssh-keygen"

    # Application
    LOG_LEVEL: str = "WARNING"

    @property
    def otp_service_name(self) -> str:
        return f"{self.SERVICE_NAME}{self.OTP_SERVICE_SUFFIX}"

    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL.rstrip('/')}/create_pair/{self.SCOPE}/"

    @property
    def key_path(self) -> Path:
        ssh_dir = self.SSH_DIR if self.SSH_DIR is not None else Path.home() / ".ssh"
        return Path(ssh_dir) / self.KEY_NAME

settings = Settings()

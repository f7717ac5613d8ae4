import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError

from sshproxy.core.config import Settings, settings as default_settings
from sshproxy.core.exceptions import SecretNotFoundError, SecretStoreError
from sshproxy.core.security import normalize_secret

logger = logging.getLogger(__name__)

class KeychainStore:
    """
    Password and OTP seed in the OS keychain, keyed by service and username.
    `backend` is anything exposing keyring's get_password/set_password.
    """

    def __init__(self, settings: Optional[Settings] = None, backend=None):
        self.settings = settings or default_settings
        self.backend = backend if backend is not None else keyring

    def get(self, service: str, account: str) -> str:
        try:
            value = self.backend.get_password(service, account)
        except KeyringError as e:
            raise SecretStoreError(f"Failed to read '{service}' from keychain: {e}") from e
        if value is None:
            raise SecretNotFoundError(service, account)
        return value

    def set(self, service: str, account: str, value: str) -> None:
        try:
            self.backend.set_password(service, account, value)
        except KeyringError as e:
            raise SecretStoreError(f"Failed to store '{service}' in keychain: {e}") from e
        logger.info("Stored secret", extra={"service": service, "account": account})

    def get_password(self, username: str) -> str:
        return self.get(self.settings.SERVICE_NAME, username)

    def get_otp_secret(self, username: str) -> str:
        return self.get(self.settings.otp_service_name, username)

    def set_password(self, username: str, password: str) -> None:
        self.set(self.settings.SERVICE_NAME, username, password)

    def set_otp_secret(self, username: str, secret: str) -> None:
        # Reject a mistyped seed now rather than at the next login
        self.set(self.settings.otp_service_name, username, normalize_secret(secret))

import logging
from typing import Optional

from sshproxy.core import security
from sshproxy.core.config import Settings, settings as default_settings
from sshproxy.core.exceptions import ExternalToolFailedError
from sshproxy.schemas.keys import KeyFiles
from sshproxy.services.bundle import parse_bundle
from sshproxy.services.exchange import ExchangeClient
from sshproxy.services.keychain import KeychainStore
from sshproxy.services.persistence import KeyInspector, SshKeygen, save_key_files

logger = logging.getLogger(__name__)

class CertificateAgent:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[KeychainStore] = None,
        exchange: Optional[ExchangeClient] = None,
        inspector: Optional[KeyInspector] = None
    ):
        self.settings = settings or default_settings
        self.store = store or KeychainStore(self.settings)
        self.exchange = exchange or ExchangeClient(self.settings)
        self.inspector = inspector or SshKeygen(self.settings)

    async def fetch(self, username: str, timestamp: Optional[float] = None) -> KeyFiles:
        """
        One attempt end to end: keychain -> TOTP -> create_pair -> disk.
        Nothing is written unless the response passed every check.
        """
        # 1. Credentials
        password = self.store.get_password(username)
        otp_secret = self.store.get_otp_secret(username)

        # 2. Token
        code = security.generate_totp(otp_secret, timestamp)
        token = security.combine_credentials(password, code)

        # 3. Exchange
        body = await self.exchange.request(username, token)
        bundle = parse_bundle(body)

        # 4. Persist
        return save_key_files(self.settings.key_path, bundle, self.inspector)

    def validity(self, files: KeyFiles) -> Optional[str]:
        """Certificate validity line, or None if ssh-keygen could not report it."""
        try:
            return self.inspector.get_validity(files.certificate)
        except ExternalToolFailedError as e:
            logger.warning("Could not read certificate validity", extra={"error": str(e)})
            return None

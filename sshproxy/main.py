import sys
import asyncio
import getpass
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from sshproxy.core.config import Settings, settings as default_settings
from sshproxy.core.exceptions import SshProxyError
from sshproxy.services.agent import CertificateAgent
from sshproxy.services.keychain import KeychainStore
from sshproxy.utils.logging import setup_logging

logger = logging.getLogger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sshproxy",
        description="Obtain a short-lived SSH key and certificate from sshproxy"
    )
    parser.add_argument("-u", "--user", help="Username (default: the current user)")
    parser.add_argument("-o", "--output", help="Private key path (default: ~/.ssh/nersc)")
    parser.add_argument("-s", "--scope", help="Issuance scope (default: %s)" % default_settings.SCOPE)
    parser.add_argument("--url", help="sshproxy base URL (default: %s)" % default_settings.BASE_URL)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--store-password", action="store_true", help="Store the password in the keychain")
    parser.add_argument("--store-otp-secret", action="store_true", help="Store the OTP seed in the keychain")
    parser.add_argument(
        "--store-credentials",
        action="store_true",
        help="Store both the password and the OTP seed in the keychain"
    )
    return parser

def resolve_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    base = base or default_settings
    update = {}
    if args.output:
        key_path = Path(args.output).expanduser()
        update["SSH_DIR"] = key_path.parent
        update["KEY_NAME"] = key_path.name
    if args.scope:
        update["SCOPE"] = args.scope
    if args.url:
        update["BASE_URL"] = args.url
    return base.model_copy(update=update)

def store_credentials(store: KeychainStore, username: str, password: bool, otp_secret: bool) -> None:
    if password:
        store.set_password(username, getpass.getpass(f"Password for {username}: "))
        print(f"Password stored for {username}")
    if otp_secret:
        store.set_otp_secret(username, getpass.getpass(f"OTP secret for {username}: "))
        print(f"OTP secret stored for {username}")

async def fetch_and_persist(agent: CertificateAgent, username: str) -> None:
    print(f"Requesting SSH key for user: {username}")
    files = await agent.fetch(username)
    print(f"Successfully obtained ssh key: {files.private_key}")

    validity = agent.validity(files)
    if validity:
        print(f"Key is {validity.lower()}")

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    settings = resolve_settings(args)

    try:
        username = args.user or getpass.getuser()
    except (OSError, KeyError):
        print("Error: Could not determine username from environment; pass --user", file=sys.stderr)
        return 1

    try:
        store_password = args.store_password or args.store_credentials
        store_otp = args.store_otp_secret or args.store_credentials
        if store_password or store_otp:
            store_credentials(KeychainStore(settings), username, store_password, store_otp)
            return 0

        asyncio.run(fetch_and_persist(CertificateAgent(settings), username))
        return 0
    except SshProxyError as e:
        logger.debug("Invocation failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130

if __name__ == "__main__":
    sys.exit(main())

from pathlib import Path
from typing import Optional, Sequence

BODY_EXCERPT_LIMIT = 500


def excerpt(body: str, limit: int = BODY_EXCERPT_LIMIT) -> str:
    """Shorten a response body for inclusion in an error message."""
    body = body.strip()
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


class SshProxyError(Exception):
    """Base error. Every failure of a single invocation is one of these."""
    pass

class SecretNotFoundError(SshProxyError):
    """No secret stored for the (service, account) pair."""

    def __init__(self, service: str, account: str):
        self.service = service
        self.account = account
        super().__init__(
            f"No secret stored for service '{service}' and account '{account}'. "
            "Run with --store-credentials first"
        )

class SecretStoreError(SshProxyError):
    """The OS keychain backend failed."""
    pass

class InvalidSecretError(SshProxyError):
    """OTP seed is not valid unpadded base32."""
    pass

class ExchangeFailedError(SshProxyError):
    """The issuance service answered with a non-2xx status or could not be reached."""

    def __init__(self, status_code: Optional[int], body: str = "", reason: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"Failed to send request to sshproxy server: {reason}"
        else:
            message = f"Server returned error: {status_code} - {excerpt(body)}"
        super().__init__(message)

class AuthenticationFailedError(SshProxyError):
    """The service rejected the password/OTP combination."""

    def __init__(self, message: str = "Authentication failed. Check your password and OTP"):
        super().__init__(message)

class MalformedResponseError(SshProxyError):
    """Response does not carry a recognised private key."""

    def __init__(self, body: str):
        self.body = body
        super().__init__(f"Response does not contain a valid SSH private key:\n{excerpt(body)}")

class NoCertificateFoundError(SshProxyError):
    """Key bundle carries no ssh-rsa / ssh-ed25519 certificate line."""

    def __init__(self, message: str = "No certificate found in key file"):
        super().__init__(message)

class PersistenceFailedError(SshProxyError):
    """Writing key material to disk failed."""

    def __init__(self, path: Path, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"Failed to write {path}: {error}")

class ExternalToolFailedError(SshProxyError):
    """The key inspection tool exited non-zero or could not be started."""

    def __init__(self, command: Sequence[str], returncode: Optional[int], stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        name = self.command[0] if self.command else "tool"
        if returncode is None:
            message = f"{name} could not be run: {stderr.strip()}"
        else:
            message = f"{name} failed (exit {returncode}): {stderr.strip()}"
        super().__init__(message)

from sshproxy.core.exceptions import NoCertificateFoundError
from sshproxy.schemas.keys import KeyBundle

CERTIFICATE_MARKERS = ("ssh-rsa", "ssh-ed25519")

def extract_certificate(bundle: str) -> str:
    """Return the first line of the bundle that carries an ssh-rsa or ssh-ed25519 key."""
    for line in bundle.splitlines():
        if any(marker in line for marker in CERTIFICATE_MARKERS):
            return line
    raise NoCertificateFoundError()

def parse_bundle(body: str) -> KeyBundle:
    return KeyBundle(content=body, certificate=extract_certificate(body))

"""Client for the sshproxy certificate-issuance service."""

__version__ = "0.1.0"

#!/usr/bin/env python3
"""
Print the current sshproxy one-time code for a base32 seed.

Handy for checking that a seed stored with --store-otp-secret matches the
authenticator app before requesting a key.
"""
import sys
import time

# Adjust path to include sshproxy
sys.path.append(".")

from sshproxy.core.exceptions import InvalidSecretError
from sshproxy.core.security import generate_totp, seconds_remaining


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv

    if len(argv) < 1:
        print("Usage: totp_generator.py <BASE32_SECRET>")
        print("\nExample:")
        print("  totp_generator.py JBSWY3DPEHPK3PXP")
        return 1

    now = time.time()
    try:
        code = generate_totp(argv[0], now)
    except InvalidSecretError as e:
        print(f"Error generating TOTP: {e}", file=sys.stderr)
        return 1

    print(f"Code: {code}")
    print(f"Valid for: ~{seconds_remaining(now)} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations
import argparse
import binascii
import logging
import sys
from getpass import getpass

from pass2key import KEY_SIZES, DerivationError, LegacyKDFParams, derive, new_salt


def parse_salt(text: str) -> bytes:
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError):
        raise argparse.ArgumentTypeError(f"salt must be hex: {text!r}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pass2key",
        description="pass2key - legacy AES-CBC password-to-key derivation (1000 iterations).",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    der = sub.add_parser("derive", help="Derive a key from a password and salt")
    der.add_argument(
        "--salt", type=parse_salt, default=None,
        help="Salt as hex (default: random, printed to stderr)",
    )
    der.add_argument(
        "-l", "--length", type=int, choices=KEY_SIZES, default=32,
        help="Key length in bytes (default: 32)",
    )
    der.add_argument("-v", "--verbose", action="store_true", help="Log derivation steps")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    password = getpass("Password: ")

    salt = args.salt
    if salt is None:
        salt = new_salt(LegacyKDFParams(key_len=args.length))
        print(f"Salt: {salt.hex()}", file=sys.stderr)

    try:
        key = derive(password, salt, args.length)
    except DerivationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(key.hex())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
"""
Generate a Fernet key for encrypting Gmail and Fitbit tokens at rest.

    python scripts/generate_encryption_key.py           # print a new key
    python scripts/generate_encryption_key.py --check   # validate ENCRYPTION_KEY from the environment
"""
import os
import sys

from cryptography.fernet import Fernet


def check_key() -> int:
    key = os.getenv("ENCRYPTION_KEY")
    if not key:
        print("ENCRYPTION_KEY is not set")
        return 1
    try:
        Fernet(key.encode())
    except ValueError as e:
        print(f"ENCRYPTION_KEY is invalid: {e}")
        return 1
    print("ENCRYPTION_KEY is a valid Fernet key")
    return 0


def generate_key() -> int:
    key = Fernet.generate_key().decode()
    print("Add this to your .env file:")
    print(f"ENCRYPTION_KEY={key}")
    print("\nConnected accounts must be reconnected if this key ever changes.")
    return 0


if __name__ == "__main__":
    sys.exit(check_key() if "--check" in sys.argv[1:] else generate_key())

#!/usr/bin/env python3
import secrets


def generate_jwt_secret(length=64):
    """Hex secret suitable for JWT_SECRET_KEY"""
    return secrets.token_hex(length)


if __name__ == "__main__":
    print(f"JWT_SECRET_KEY={generate_jwt_secret()}")

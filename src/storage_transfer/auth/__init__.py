"""
Authentication module.

Components:
    - Credentials: Access keys with an optional expiration instant
    - CredentialsProvider: Protocol for credential/identity sources
    - StaticCredentialsProvider: Fixed or environment-sourced credentials
"""

from storage_transfer.auth.credentials import (
    Credentials,
    CredentialsProvider,
    StaticCredentialsProvider,
    parse_expiration,
)

__all__ = [
    "Credentials",
    "CredentialsProvider",
    "StaticCredentialsProvider",
    "parse_expiration",
]

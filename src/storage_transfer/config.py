"""Storage configuration from environment variables and config.yaml."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from storage_transfer.models import AccessLevel

# Default config path: config.yaml in the working directory
DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass
class StorageConfig:
    """Object storage connection and behavior configuration.

    Load from environment using StorageConfig.from_env() or from a YAML file
    using load_config(). All timing values in seconds.
    """

    # Location
    bucket: str = ""
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None  # None = AWS default endpoint
    addressing_style: str = "auto"  # auto | path | virtual

    # Key prefixing
    default_access_level: AccessLevel = AccessLevel.GUEST

    # HTTP transfer behavior
    chunk_size: int = 64 * 1024
    request_timeout_seconds: float = 300.0
    max_connections: int = 100

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "StorageConfig":
        """Load configuration from environment variables.

        Optional environment variables (with defaults):
            STORAGE_BUCKET: Bucket name (no default; resolution fails without it)
            STORAGE_REGION: us-east-1 (default)
            STORAGE_ENDPOINT_URL: S3-compatible endpoint (default: AWS)
            STORAGE_ADDRESSING_STYLE: auto (default)
            STORAGE_DEFAULT_ACCESS_LEVEL: guest (default)
            STORAGE_CHUNK_SIZE: 65536 (default)
            STORAGE_REQUEST_TIMEOUT_SECONDS: 300 (default)
            STORAGE_MAX_CONNECTIONS: 100 (default)

        Args:
            dotenv: Also read a .env file from the working directory

        Raises:
            ValueError: If a value cannot be parsed
        """
        if dotenv:
            load_dotenv()
        return cls._from_mapping({})

    @classmethod
    def _from_mapping(cls, data: Dict[str, Any]) -> "StorageConfig":
        """Build config from a mapping, with environment variables taking priority."""
        return cls(
            bucket=os.getenv("STORAGE_BUCKET", data.get("bucket", "")),
            region=os.getenv("STORAGE_REGION", data.get("region", "us-east-1")),
            endpoint_url=os.getenv("STORAGE_ENDPOINT_URL", data.get("endpoint_url")),
            addressing_style=os.getenv(
                "STORAGE_ADDRESSING_STYLE", data.get("addressing_style", "auto")
            ),
            default_access_level=AccessLevel(
                os.getenv(
                    "STORAGE_DEFAULT_ACCESS_LEVEL",
                    data.get("default_access_level", AccessLevel.GUEST.value),
                )
            ),
            chunk_size=int(
                os.getenv("STORAGE_CHUNK_SIZE", data.get("chunk_size", 64 * 1024))
            ),
            request_timeout_seconds=float(
                os.getenv(
                    "STORAGE_REQUEST_TIMEOUT_SECONDS",
                    data.get("request_timeout_seconds", 300.0),
                )
            ),
            max_connections=int(
                os.getenv("STORAGE_MAX_CONNECTIONS", data.get("max_connections", 100))
            ),
        )


def load_config(config_path: Optional[Path] = None) -> StorageConfig:
    """Load storage configuration from config.yaml and environment variables.

    Configuration priority (highest to lowest):
    1. Environment variables
    2. config.yaml file (under 'storage:' key)
    3. Dataclass defaults

    Args:
        config_path: Path to YAML file (default: ./config.yaml). A missing
            file is not an error.
    """
    config_path = config_path or DEFAULT_CONFIG_PATH

    storage_data: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r") as f:
            yaml_data = yaml.safe_load(f) or {}
        storage_data = yaml_data.get("storage", {}) or {}

    return StorageConfig._from_mapping(storage_data)

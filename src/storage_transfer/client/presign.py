"""
Presigned URL generation backed by botocore.

Wire-level SigV4 signing stays inside botocore; this module only maps
PresignOptions onto a botocore S3 client and classifies its failures.
Client construction and signing are synchronous, so they run in a worker
thread off the event loop.
"""

import asyncio
import logging
import threading
from typing import Any, Dict, Optional

import botocore.session
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from storage_transfer.client.base import PresignOptions
from storage_transfer.errors import ServiceError, wrap_exception
from storage_transfer.logging import get_logger, log_with_context

logger = get_logger(__name__)

_default_session: Optional[botocore.session.Session] = None
_session_lock = threading.Lock()


def get_default_session() -> botocore.session.Session:
    """
    Return the process-wide botocore session.

    The session caches the loaded S3 service model, so only the first
    client built from it pays for parsing.
    """
    global _default_session
    with _session_lock:
        if _default_session is None:
            _default_session = botocore.session.get_session()
        return _default_session


class BotocorePresigner:
    """
    Presigner using botocore's ``generate_presigned_url``.

    A botocore client is built per call from the credentials in the options,
    so rotating credentials are always picked up. The underlying session is
    shared across presigners unless one is passed in.

    Usage:
        presigner = BotocorePresigner()
        url = await presigner.get_presigned_url(
            PresignOptions(credentials, "us-east-1", expiration=900),
            bucket="media",
            key="public/photo.jpg",
        )
    """

    def __init__(self, session: Optional[botocore.session.Session] = None):
        self._session = session or get_default_session()

    def _build_client(self, options: PresignOptions) -> Any:
        """Create a botocore S3 client from presign options."""
        config = Config(
            signature_version="s3v4",
            s3={"addressing_style": options.addressing_style},
        )
        credentials = options.credentials
        # botocore sessions are not safe for concurrent create_client calls
        with _session_lock:
            return self._session.create_client(
                "s3",
                region_name=options.region,
                endpoint_url=options.endpoint_url,
                aws_access_key_id=credentials.access_key_id,
                aws_secret_access_key=credentials.secret_access_key,
                aws_session_token=credentials.session_token,
                config=config,
            )

    def _sign(
        self,
        options: PresignOptions,
        method: str,
        request_params: Dict[str, object],
    ) -> str:
        return self._build_client(options).generate_presigned_url(
            method,
            Params=request_params,
            ExpiresIn=int(options.expiration),
        )

    async def get_presigned_url(
        self,
        options: PresignOptions,
        *,
        bucket: str,
        key: str,
        method: str = "get_object",
        params: Optional[Dict[str, object]] = None,
    ) -> str:
        """Generate a presigned URL for ``method`` on bucket/key.

        Raises:
            ServiceError: If botocore fails or returns an empty URL
            ServiceConnectionError: If botocore reports a connection failure
        """
        request_params: Dict[str, object] = {"Bucket": bucket, "Key": key}
        if params:
            request_params.update(params)

        try:
            url = await asyncio.to_thread(self._sign, options, method, request_params)
        except (BotoCoreError, ClientError) as exc:
            raise wrap_exception(
                exc,
                context={"bucket": bucket, "key": key},
                message=f"Failed to generate presigned URL: {exc}",
            ) from exc

        if not url:
            raise ServiceError("Generated presigned URL is empty")

        log_with_context(
            logger,
            logging.DEBUG,
            "Presigned URL generated",
            bucket=bucket,
            key=key,
            effective_expiration=options.expiration,
            url=url,
        )
        return str(url)

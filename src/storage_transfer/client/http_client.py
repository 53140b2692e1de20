"""
Object service client over aiohttp.

Every request is presigned by a Presigner and then issued as a plain HTTP
call, so no signing logic lives here. Bodies stream in config.chunk_size
chunks; the CancelSignal is checked between chunks and a listener closes the
in-flight response when the signal trips.
"""

import asyncio
import logging
import re
from email.utils import parsedate_to_datetime
from typing import AsyncIterator, Dict, Mapping, Optional, Tuple

import aiohttp

from storage_transfer.client.base import (
    GetObjectOutput,
    HeadObjectOutput,
    PresignOptions,
    Presigner,
    PutObjectOutput,
)
from storage_transfer.client.presign import BotocorePresigner
from storage_transfer.config import StorageConfig
from storage_transfer.errors import (
    ServiceConnectionError,
    ServiceError,
    TransferCanceledError,
    service_error_from_status,
    wrap_exception,
)
from storage_transfer.logging import get_logger, log_with_context
from storage_transfer.models import ProgressCallback, TransferProgress
from storage_transfer.resolver import ServiceConfig
from storage_transfer.security import sanitize_error_message
from storage_transfer.tasks.signal import CancelSignal

logger = get_logger(__name__)

# Lifetime of the URLs signed for this client's own requests
REQUEST_URL_EXPIRATION = 900

METADATA_HEADER_PREFIX = "x-amz-meta-"

_ERROR_CODE_PATTERN = re.compile(r"<Code>([^<]+)</Code>")


def parse_object_headers(headers: Mapping[str, str]) -> Dict[str, object]:
    """
    Extract object attributes from S3 response headers.

    Returns:
        Keyword arguments for HeadObjectOutput
    """
    content_length: Optional[int] = None
    raw_length = headers.get("Content-Length")
    if raw_length is not None:
        try:
            content_length = int(raw_length)
        except ValueError:
            content_length = None

    last_modified = None
    raw_modified = headers.get("Last-Modified")
    if raw_modified:
        try:
            last_modified = parsedate_to_datetime(raw_modified)
        except (TypeError, ValueError):
            last_modified = None

    metadata = {
        name.lower()[len(METADATA_HEADER_PREFIX):]: value
        for name, value in headers.items()
        if name.lower().startswith(METADATA_HEADER_PREFIX)
    }

    return {
        "content_length": content_length,
        "content_type": headers.get("Content-Type"),
        "etag": headers.get("ETag"),
        "last_modified": last_modified,
        "version_id": headers.get("x-amz-version-id"),
        "metadata": metadata,
    }


class HttpObjectClient:
    """
    ObjectClient implementation issuing presigned requests with aiohttp.

    Session ownership:
        Pass a session to share one connection pool across calls (the caller
        closes it). Without one, use the client as an async context manager,
        or each call opens and closes its own session.

    Usage:
        async with HttpObjectClient() as client:
            output = await client.get_object(
                resolved.service_config,
                bucket=resolved.bucket,
                key=resolved.key_prefix + "photo.jpg",
                signal=signal,
            )
    """

    def __init__(
        self,
        presigner: Optional[Presigner] = None,
        session: Optional[aiohttp.ClientSession] = None,
        max_connections: int = 100,
    ):
        self._presigner = presigner or BotocorePresigner()
        self._session = session
        self._owns_session = False
        self._max_connections = max_connections

    @classmethod
    def from_config(
        cls, config: StorageConfig, presigner: Optional[Presigner] = None
    ) -> "HttpObjectClient":
        """Build a client sized by StorageConfig.max_connections."""
        return cls(presigner=presigner, max_connections=config.max_connections)

    async def __aenter__(self) -> "HttpObjectClient":
        if self._session is None:
            self._session = self._create_session()
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False

    def _create_session(
        self, max_connections: Optional[int] = None
    ) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(limit=max_connections or self._max_connections)
        return aiohttp.ClientSession(connector=connector)

    def _acquire_session(
        self, config: ServiceConfig
    ) -> Tuple[aiohttp.ClientSession, bool]:
        """Return (session, close_after_call). Per-call sessions are sized by config."""
        if self._session is not None:
            return self._session, False
        return self._create_session(config.max_connections), True

    async def _presign(
        self,
        config: ServiceConfig,
        *,
        bucket: str,
        key: str,
        method: str,
        params: Optional[Dict[str, object]] = None,
    ) -> str:
        return await self._presigner.get_presigned_url(
            PresignOptions.from_service_config(config, REQUEST_URL_EXPIRATION),
            bucket=bucket,
            key=key,
            method=method,
            params=params,
        )

    async def _error_from_response(
        self, response: aiohttp.ClientResponse, operation: str, bucket: str, key: str
    ) -> ServiceError:
        code = None
        if response.method != "HEAD":
            try:
                text = await response.text()
            except (aiohttp.ClientError, UnicodeDecodeError):
                text = ""
            match = _ERROR_CODE_PATTERN.search(text)
            if match:
                code = match.group(1)

        message = f"{operation} failed for {key}: HTTP {response.status}"
        if code:
            message = f"{message} ({code})"

        return service_error_from_status(
            response.status,
            message,
            context={"bucket": bucket, "key": key, "http_status": response.status},
        )

    def _connection_error(
        self,
        exc: Exception,
        operation: str,
        bucket: str,
        key: str,
        signal: Optional[CancelSignal],
    ) -> Exception:
        # A tripped signal closes the response, which surfaces as a client error.
        if signal is not None and signal.cancelled:
            return TransferCanceledError(signal.reason)
        message = "Request timed out" if isinstance(exc, asyncio.TimeoutError) else str(exc)
        return wrap_exception(
            exc,
            default_class=ServiceConnectionError,
            context={"bucket": bucket, "key": key},
            message=f"{operation} failed for {key}: {sanitize_error_message(message)}",
        )

    async def get_object(
        self,
        config: ServiceConfig,
        *,
        bucket: str,
        key: str,
        signal: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> GetObjectOutput:
        """
        Download an object into memory.

        Raises:
            TransferCanceledError: Signal tripped before or during the transfer
            ServiceError: Non-200 response (typed by status)
            ServiceConnectionError: Network failure or timeout
        """
        if signal is not None:
            signal.raise_if_cancelled()

        url = await self._presign(config, bucket=bucket, key=key, method="get_object")
        timeout = aiohttp.ClientTimeout(total=config.request_timeout_seconds)
        session, close_session = self._acquire_session(config)

        try:
            async with session.get(url, timeout=timeout) as response:

                def on_cancel(_reason: Optional[BaseException]) -> None:
                    response.close()

                if signal is not None:
                    signal.add_listener(on_cancel)
                try:
                    if response.status != 200:
                        raise await self._error_from_response(
                            response, "GetObject", bucket, key
                        )

                    attributes = parse_object_headers(response.headers)
                    total = attributes["content_length"]
                    body = bytearray()

                    async for chunk in response.content.iter_chunked(config.chunk_size):
                        if signal is not None:
                            signal.raise_if_cancelled()
                        body.extend(chunk)
                        if on_progress is not None:
                            on_progress(TransferProgress(len(body), total))

                    if signal is not None:
                        signal.raise_if_cancelled()
                finally:
                    if signal is not None:
                        signal.remove_listener(on_cancel)

            log_with_context(
                logger,
                logging.DEBUG,
                "Object downloaded",
                bucket=bucket,
                key=key,
                bytes_transferred=len(body),
                http_status=200,
            )
            attributes["content_length"] = attributes["content_length"] or len(body)
            return GetObjectOutput(body=bytes(body), **attributes)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._connection_error(e, "GetObject", bucket, key, signal) from e
        finally:
            if close_session:
                await session.close()

    async def head_object(
        self,
        config: ServiceConfig,
        *,
        bucket: str,
        key: str,
        signal: Optional[CancelSignal] = None,
    ) -> HeadObjectOutput:
        """
        Fetch object metadata without the body.

        Raises:
            ObjectNotFoundError: Object does not exist
            ServiceError: Other non-200 response
            ServiceConnectionError: Network failure or timeout
        """
        if signal is not None:
            signal.raise_if_cancelled()

        url = await self._presign(config, bucket=bucket, key=key, method="head_object")
        timeout = aiohttp.ClientTimeout(total=config.request_timeout_seconds)
        session, close_session = self._acquire_session(config)

        try:
            async with session.head(url, timeout=timeout) as response:
                if response.status != 200:
                    raise await self._error_from_response(
                        response, "HeadObject", bucket, key
                    )
                return HeadObjectOutput(**parse_object_headers(response.headers))

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._connection_error(e, "HeadObject", bucket, key, signal) from e
        finally:
            if close_session:
                await session.close()

    async def put_object(
        self,
        config: ServiceConfig,
        *,
        bucket: str,
        key: str,
        body: bytes,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        signal: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PutObjectOutput:
        """
        Upload an object in a single request.

        Signed parameters and request headers must agree, so content type and
        metadata are passed to both the presigner and the request.

        Raises:
            TransferCanceledError: Signal tripped before or during the upload
            ServiceError: Non-2xx response (typed by status)
            ServiceConnectionError: Network failure or timeout
        """
        if signal is not None:
            signal.raise_if_cancelled()

        params: Dict[str, object] = {}
        headers = {"Content-Length": str(len(body))}
        if content_type:
            params["ContentType"] = content_type
            headers["Content-Type"] = content_type
        if metadata:
            params["Metadata"] = dict(metadata)
            for name, value in metadata.items():
                headers[f"{METADATA_HEADER_PREFIX}{name}"] = value

        url = await self._presign(
            config, bucket=bucket, key=key, method="put_object", params=params or None
        )
        timeout = aiohttp.ClientTimeout(total=config.request_timeout_seconds)
        session, close_session = self._acquire_session(config)

        async def body_chunks() -> AsyncIterator[bytes]:
            sent = 0
            for offset in range(0, len(body), config.chunk_size):
                if signal is not None:
                    signal.raise_if_cancelled()
                chunk = body[offset : offset + config.chunk_size]
                yield chunk
                sent += len(chunk)
                if on_progress is not None:
                    on_progress(TransferProgress(sent, len(body)))

        try:
            async with session.put(
                url, data=body_chunks(), headers=headers, timeout=timeout
            ) as response:
                if response.status not in (200, 201):
                    raise await self._error_from_response(
                        response, "PutObject", bucket, key
                    )
                if signal is not None:
                    signal.raise_if_cancelled()

                log_with_context(
                    logger,
                    logging.DEBUG,
                    "Object uploaded",
                    bucket=bucket,
                    key=key,
                    bytes_transferred=len(body),
                    http_status=response.status,
                )
                return PutObjectOutput(
                    etag=response.headers.get("ETag"),
                    version_id=response.headers.get("x-amz-version-id"),
                )

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._connection_error(e, "PutObject", bucket, key, signal) from e
        finally:
            if close_session:
                await session.close()

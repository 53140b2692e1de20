"""
Tests for HttpObjectClient.

Test coverage:
- Streaming GET with progress and header parsing
- HTTP status mapping to typed service errors
- Connection errors and timeouts
- Signal checks between chunks and connection teardown on cancel
- HEAD and PUT requests
- Session ownership (shared vs per-call)
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from storage_transfer.client.http_client import (
    REQUEST_URL_EXPIRATION,
    HttpObjectClient,
    parse_object_headers,
)
from storage_transfer.config import StorageConfig
from storage_transfer.errors import (
    AccessDeniedError,
    ObjectNotFoundError,
    ServiceConnectionError,
    ServiceUnavailableError,
    TransferCanceledError,
)
from storage_transfer.models import TransferProgress
from storage_transfer.tasks.signal import CancelSignal

SIGNED_URL = "https://media-bucket.s3.amazonaws.com/public/notes.txt?X-Amz-Signature=abc"

OBJECT_HEADERS = {
    "Content-Length": "11",
    "Content-Type": "text/plain",
    "ETag": '"etag-1"',
    "Last-Modified": "Wed, 01 May 2024 12:00:00 GMT",
    "x-amz-version-id": "v1",
    "x-amz-meta-owner": "alice",
    "X-Amz-Meta-Project": "apollo",
}


def make_response(status=200, headers=None, chunks=(), text="", method="GET"):
    """Build a mock aiohttp response."""
    response = MagicMock()
    response.status = status
    response.method = method
    response.headers = headers if headers is not None else {}

    async def iter_chunked(size):
        for chunk in chunks:
            yield chunk

    response.content.iter_chunked = iter_chunked
    response.text = AsyncMock(return_value=text)
    response.close = MagicMock()
    return response


def make_session(method, response=None, error=None):
    """Build a mock session whose ``method`` returns an async context manager."""
    session = MagicMock()
    ctx = MagicMock()
    if error is not None:
        ctx.__aenter__ = AsyncMock(side_effect=error)
    else:
        ctx.__aenter__ = AsyncMock(return_value=response)
    ctx.__aexit__ = AsyncMock(return_value=False)
    getattr(session, method).return_value = ctx
    session.close = AsyncMock()
    return session


@pytest.fixture
def presigner():
    presigner = MagicMock()
    presigner.get_presigned_url = AsyncMock(return_value=SIGNED_URL)
    return presigner


@pytest.fixture
def service_config(resolved):
    return resolved.service_config


class TestParseObjectHeaders:
    """Test S3 header parsing."""

    def test_parses_all_fields(self):
        attributes = parse_object_headers(OBJECT_HEADERS)

        assert attributes["content_length"] == 11
        assert attributes["content_type"] == "text/plain"
        assert attributes["etag"] == '"etag-1"'
        assert attributes["last_modified"] == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert attributes["version_id"] == "v1"
        assert attributes["metadata"] == {"owner": "alice", "project": "apollo"}

    def test_missing_and_malformed_values(self):
        attributes = parse_object_headers(
            {"Content-Length": "abc", "Last-Modified": "not a date"}
        )

        assert attributes["content_length"] is None
        assert attributes["last_modified"] is None
        assert attributes["metadata"] == {}


class TestGetObject:
    """Test streaming downloads."""

    @pytest.mark.asyncio
    async def test_streams_body_with_progress(self, presigner, service_config):
        response = make_response(
            headers=OBJECT_HEADERS, chunks=[b"hell", b"o wo", b"rld"]
        )
        session = make_session("get", response)
        events = []

        client = HttpObjectClient(presigner=presigner, session=session)
        output = await client.get_object(
            service_config,
            bucket="media-bucket",
            key="public/notes.txt",
            on_progress=events.append,
        )

        assert output.body == b"hello world"
        assert output.content_length == 11
        assert output.metadata == {"owner": "alice", "project": "apollo"}
        assert events == [
            TransferProgress(4, 11),
            TransferProgress(8, 11),
            TransferProgress(11, 11),
        ]
        assert session.get.call_args.args[0] == SIGNED_URL
        session.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_presigns_get_request(self, presigner, service_config):
        session = make_session("get", make_response(headers=OBJECT_HEADERS))

        client = HttpObjectClient(presigner=presigner, session=session)
        await client.get_object(service_config, bucket="media-bucket", key="public/a")

        call = presigner.get_presigned_url.await_args
        assert call.args[0].expiration == REQUEST_URL_EXPIRATION
        assert call.args[0].credentials is service_config.credentials
        assert call.kwargs["bucket"] == "media-bucket"
        assert call.kwargs["key"] == "public/a"
        assert call.kwargs["method"] == "get_object"

    @pytest.mark.asyncio
    async def test_size_falls_back_to_body_length(self, presigner, service_config):
        session = make_session("get", make_response(chunks=[b"abc"]))

        client = HttpObjectClient(presigner=presigner, session=session)
        output = await client.get_object(service_config, bucket="b", key="k")

        assert output.content_length == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,error_class",
        [
            (404, ObjectNotFoundError),
            (403, AccessDeniedError),
            (503, ServiceUnavailableError),
        ],
    )
    async def test_status_mapping(self, presigner, service_config, status, error_class):
        body = "<Error><Code>SomeCode</Code><Message>nope</Message></Error>"
        session = make_session("get", make_response(status=status, text=body))

        client = HttpObjectClient(presigner=presigner, session=session)
        with pytest.raises(error_class) as exc_info:
            await client.get_object(service_config, bucket="b", key="public/k")

        assert exc_info.value.status_code == status
        assert "SomeCode" in str(exc_info.value)
        assert exc_info.value.context["http_status"] == status

    @pytest.mark.asyncio
    async def test_connection_error(self, presigner, service_config):
        session = make_session(
            "get", error=aiohttp.ClientConnectionError("Connection reset by peer")
        )

        client = HttpObjectClient(presigner=presigner, session=session)
        with pytest.raises(ServiceConnectionError) as exc_info:
            await client.get_object(service_config, bucket="b", key="k")

        assert exc_info.value.is_retryable is True
        assert isinstance(exc_info.value.cause, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_timeout(self, presigner, service_config):
        session = make_session("get", error=asyncio.TimeoutError())

        client = HttpObjectClient(presigner=presigner, session=session)
        with pytest.raises(ServiceConnectionError, match="timed out"):
            await client.get_object(service_config, bucket="b", key="k")

    @pytest.mark.asyncio
    async def test_payload_error_is_retryable(self, presigner, service_config):
        session = make_session(
            "get", error=aiohttp.ClientPayloadError("Response payload is not completed")
        )

        client = HttpObjectClient(presigner=presigner, session=session)
        with pytest.raises(ServiceConnectionError) as exc_info:
            await client.get_object(service_config, bucket="b", key="public/k")

        assert exc_info.value.is_retryable is True
        assert str(exc_info.value).startswith("GetObject failed for public/k")
        assert exc_info.value.context == {"bucket": "b", "key": "public/k"}


class TestGetObjectCancellation:
    """Test signal handling during downloads."""

    @pytest.mark.asyncio
    async def test_cancelled_signal_skips_request(self, presigner, service_config):
        session = make_session("get", make_response())
        signal = CancelSignal()
        signal.cancel()

        client = HttpObjectClient(presigner=presigner, session=session)
        with pytest.raises(TransferCanceledError):
            await client.get_object(service_config, bucket="b", key="k", signal=signal)

        presigner.get_presigned_url.assert_not_awaited()
        session.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_between_chunks_closes_response(
        self, presigner, service_config
    ):
        response = make_response(
            headers=OBJECT_HEADERS, chunks=[b"hell", b"o wo", b"rld"]
        )
        session = make_session("get", response)
        signal = CancelSignal()
        events = []

        def on_progress(progress):
            events.append(progress)
            signal.cancel()

        client = HttpObjectClient(presigner=presigner, session=session)
        with pytest.raises(TransferCanceledError):
            await client.get_object(
                service_config,
                bucket="b",
                key="k",
                signal=signal,
                on_progress=on_progress,
            )

        assert events == [TransferProgress(4, 11)]
        response.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_client_error_after_cancel_reports_cancellation(
        self, presigner, service_config
    ):
        signal = CancelSignal()
        response = make_response(headers=OBJECT_HEADERS)

        async def iter_chunked(size):
            yield b"part"
            signal.cancel()
            raise aiohttp.ClientPayloadError("connection closed")

        response.content.iter_chunked = iter_chunked
        session = make_session("get", response)

        client = HttpObjectClient(presigner=presigner, session=session)
        with pytest.raises(TransferCanceledError):
            await client.get_object(service_config, bucket="b", key="k", signal=signal)

    @pytest.mark.asyncio
    async def test_listener_removed_after_success(self, presigner, service_config):
        response = make_response(headers=OBJECT_HEADERS, chunks=[b"data"])
        session = make_session("get", response)
        signal = CancelSignal()

        client = HttpObjectClient(presigner=presigner, session=session)
        await client.get_object(service_config, bucket="b", key="k", signal=signal)
        signal.cancel()

        response.close.assert_not_called()


class TestHeadObject:
    """Test metadata requests."""

    @pytest.mark.asyncio
    async def test_returns_metadata(self, presigner, service_config):
        session = make_session("head", make_response(headers=OBJECT_HEADERS, method="HEAD"))

        client = HttpObjectClient(presigner=presigner, session=session)
        output = await client.head_object(service_config, bucket="b", key="k")

        assert output.content_length == 11
        assert output.etag == '"etag-1"'
        assert presigner.get_presigned_url.await_args.kwargs["method"] == "head_object"

    @pytest.mark.asyncio
    async def test_missing_object(self, presigner, service_config):
        response = make_response(status=404, method="HEAD")
        session = make_session("head", response)

        client = HttpObjectClient(presigner=presigner, session=session)
        with pytest.raises(ObjectNotFoundError):
            await client.head_object(service_config, bucket="b", key="k")

        response.text.assert_not_awaited()


class TestPutObject:
    """Test single-request uploads."""

    @pytest.mark.asyncio
    async def test_upload_headers_and_signed_params(self, presigner, service_config):
        response = make_response(
            headers={"ETag": '"new"', "x-amz-version-id": "v9"}, method="PUT"
        )
        session = make_session("put", response)

        client = HttpObjectClient(presigner=presigner, session=session)
        output = await client.put_object(
            service_config,
            bucket="b",
            key="public/k",
            body=b"hello",
            content_type="text/plain",
            metadata={"owner": "alice"},
        )

        assert output.etag == '"new"'
        assert output.version_id == "v9"

        headers = session.put.call_args.kwargs["headers"]
        assert headers["Content-Length"] == "5"
        assert headers["Content-Type"] == "text/plain"
        assert headers["x-amz-meta-owner"] == "alice"

        presign_call = presigner.get_presigned_url.await_args
        assert presign_call.kwargs["method"] == "put_object"
        assert presign_call.kwargs["params"] == {
            "ContentType": "text/plain",
            "Metadata": {"owner": "alice"},
        }

    @pytest.mark.asyncio
    async def test_body_streamed_in_chunks_with_progress(
        self, presigner, service_config
    ):
        session = make_session("put", make_response(method="PUT"))
        events = []

        client = HttpObjectClient(presigner=presigner, session=session)
        await client.put_object(
            service_config, bucket="b", key="k", body=b"0123456789", on_progress=events.append
        )

        data = session.put.call_args.kwargs["data"]
        chunks = [chunk async for chunk in data]

        # chunk_size is 4 in the shared fixture
        assert chunks == [b"0123", b"4567", b"89"]
        assert events[-1] == TransferProgress(10, 10)

    @pytest.mark.asyncio
    async def test_body_stream_stops_on_cancel(self, presigner, service_config):
        session = make_session("put", make_response(method="PUT"))
        signal = CancelSignal()

        client = HttpObjectClient(presigner=presigner, session=session)
        await client.put_object(
            service_config, bucket="b", key="k", body=b"0123456789", signal=signal
        )

        data = session.put.call_args.kwargs["data"]
        first = await data.__anext__()
        signal.cancel()

        assert first == b"0123"
        with pytest.raises(TransferCanceledError):
            await data.__anext__()

    @pytest.mark.asyncio
    async def test_upload_denied(self, presigner, service_config):
        session = make_session("put", make_response(status=403, method="PUT"))

        client = HttpObjectClient(presigner=presigner, session=session)
        with pytest.raises(AccessDeniedError):
            await client.put_object(service_config, bucket="b", key="k", body=b"x")


class TestSessionOwnership:
    """Test shared vs per-call sessions."""

    @pytest.mark.asyncio
    async def test_per_call_session_closed(self, presigner, service_config):
        session = make_session("head", make_response(headers=OBJECT_HEADERS, method="HEAD"))

        client = HttpObjectClient(presigner=presigner)
        with patch.object(client, "_create_session", return_value=session):
            await client.head_object(service_config, bucket="b", key="k")

        session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_per_call_session_closed_on_error(self, presigner, service_config):
        session = make_session("head", make_response(status=500, method="HEAD"))

        client = HttpObjectClient(presigner=presigner)
        with patch.object(client, "_create_session", return_value=session):
            with pytest.raises(ServiceUnavailableError):
                await client.head_object(service_config, bucket="b", key="k")

        session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_context_manager_owns_session(self, presigner, service_config):
        session = make_session("head", make_response(headers=OBJECT_HEADERS, method="HEAD"))

        client = HttpObjectClient(presigner=presigner)
        with patch.object(client, "_create_session", return_value=session) as create:
            async with client:
                await client.head_object(service_config, bucket="b", key="k")
                await client.head_object(service_config, bucket="b", key="k")

        create.assert_called_once()
        session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shared_session_not_closed(self, presigner, service_config):
        session = make_session("head", make_response(headers=OBJECT_HEADERS, method="HEAD"))

        async with HttpObjectClient(presigner=presigner, session=session) as client:
            await client.head_object(service_config, bucket="b", key="k")

        session.close.assert_not_awaited()

    def test_from_config_sizes_pool(self, presigner):
        client = HttpObjectClient.from_config(
            StorageConfig(bucket="b", max_connections=7), presigner=presigner
        )

        assert client._max_connections == 7
        assert client._presigner is presigner

    @pytest.mark.asyncio
    async def test_per_call_session_sized_by_service_config(self, presigner, resolved_factory):
        service_config = replace(resolved_factory().service_config, max_connections=7)
        session = make_session("head", make_response(headers=OBJECT_HEADERS, method="HEAD"))

        client = HttpObjectClient(presigner=presigner)
        with patch.object(client, "_create_session", return_value=session) as create:
            await client.head_object(service_config, bucket="b", key="k")

        create.assert_called_once_with(7)

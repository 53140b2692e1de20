"""
Presigned URL generation with credential-aware expiration.

The advertised validity window of a URL never outlives the credentials that
signed it:

    effective = min(requested, floor(credential_expiration - now))

and must stay strictly below MAX_URL_EXPIRATION. The clock is sampled once
per call; the same instant feeds both the remaining-lifetime computation and
the returned ``expires_at``.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from storage_transfer.client.base import ObjectClient, PresignOptions, Presigner
from storage_transfer.client.http_client import HttpObjectClient
from storage_transfer.client.presign import BotocorePresigner
from storage_transfer.errors import (
    CredentialsExpiredError,
    StorageValidationErrorCode,
    assert_validation,
)
from storage_transfer.logging import get_logger, log_with_context
from storage_transfer.metrics import record_presigned_url
from storage_transfer.models import GetUrlRequest, GetUrlResult
from storage_transfer.resolver import ConfigResolver, get_default_resolver

logger = get_logger(__name__)

# All durations in seconds
DEFAULT_PRESIGN_EXPIRATION = 900
MAX_URL_EXPIRATION = 7 * 24 * 60 * 60

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def reconcile_expiration(requested: int, credential_remaining: Optional[int]) -> int:
    """
    Pick the URL lifetime: the requested value, cut down to what the
    credentials can still honor. Ties keep ``requested``.
    """
    if credential_remaining is not None and credential_remaining < requested:
        return credential_remaining
    return requested


async def get_url(
    request: GetUrlRequest,
    *,
    resolver: Optional[ConfigResolver] = None,
    presigner: Optional[Presigner] = None,
    client: Optional[ObjectClient] = None,
    clock: Optional[Clock] = None,
) -> GetUrlResult:
    """
    Generate a presigned GET URL for an object.

    Args:
        request: Key and options (expires_in, access level,
            validate_object_existence)
        resolver: Config resolver (default: environment-backed resolver)
        presigner: URL signer (default: BotocorePresigner)
        client: Object client for the existence check (default: HttpObjectClient)
        clock: Returns the current aware datetime (default: UTC now)

    Returns:
        GetUrlResult with the URL and the instant it expires

    Raises:
        StorageValidationError: Missing key, non-positive expiration, or an
            effective expiration at or above MAX_URL_EXPIRATION
        CredentialsExpiredError: Credentials have no lifetime left
        ObjectNotFoundError: Existence check requested and object absent
    """
    try:
        result, effective = await _generate_url(
            request,
            resolver=resolver or get_default_resolver(),
            presigner=presigner,
            client=client,
            clock=clock or _utcnow,
        )
    except Exception:
        record_presigned_url(success=False)
        raise

    record_presigned_url(success=True, expiration_seconds=effective)
    return result


async def _generate_url(
    request: GetUrlRequest,
    *,
    resolver: ConfigResolver,
    presigner: Optional[Presigner],
    client: Optional[ObjectClient],
    clock: Clock,
):
    options = request.options

    assert_validation(bool(request.key), StorageValidationErrorCode.NO_KEY)

    requested = (
        options.expires_in
        if options.expires_in is not None
        else DEFAULT_PRESIGN_EXPIRATION
    )
    assert_validation(
        requested > 0,
        StorageValidationErrorCode.INVALID_URL_EXPIRATION,
        context={"requested_expiration": requested},
    )

    resolved = await resolver.resolve(options)
    final_key = resolved.key_prefix + request.key

    now = clock()
    credential_remaining = resolved.credentials.remaining_seconds(now)
    if credential_remaining is not None and credential_remaining <= 0:
        raise CredentialsExpiredError(
            "Credentials have expired",
            context={"credential_remaining": credential_remaining},
        )

    effective = reconcile_expiration(requested, credential_remaining)

    log_with_context(
        logger,
        logging.DEBUG,
        "Reconciled URL expiration",
        key=final_key,
        requested_expiration=requested,
        credential_remaining=credential_remaining,
        effective_expiration=effective,
    )

    assert_validation(
        effective < MAX_URL_EXPIRATION,
        StorageValidationErrorCode.URL_EXPIRATION_MAX_LIMIT_EXCEEDED,
        context={"effective_expiration": effective, "max": MAX_URL_EXPIRATION},
    )

    if options.validate_object_existence:
        await (client or HttpObjectClient()).head_object(
            resolved.service_config,
            bucket=resolved.bucket,
            key=final_key,
        )

    url = await (presigner or BotocorePresigner()).get_presigned_url(
        PresignOptions.from_service_config(resolved.service_config, effective),
        bucket=resolved.bucket,
        key=final_key,
    )

    expires_at = now + timedelta(seconds=effective)
    log_with_context(
        logger,
        logging.DEBUG,
        "Presigned URL ready",
        bucket=resolved.bucket,
        key=final_key,
        expires_at=expires_at.isoformat(),
        url=url,
    )
    return GetUrlResult(url=url, expires_at=expires_at), effective

"""
Security utilities for storage transfers.

Provides:
- Presigned URL sanitization (signature removal for logs)
- Error message sanitization
"""

import re
from urllib.parse import urlparse, urlunparse


# ---------------------------------------------------------------------------
# URL Sanitization (for logging)
# ---------------------------------------------------------------------------

# Query parameters of a presigned URL that grant access if leaked
SENSITIVE_PARAMS = {
    "x-amz-signature",
    "x-amz-credential",
    "x-amz-security-token",
    "signature",
    "awsaccesskeyid",
    "token",
    "access_token",
}


def sanitize_url(url: str) -> str:
    """
    Remove sensitive query parameters from URL.

    Preserves the path and the non-secret signing parameters (expiry, date)
    for debugging.

    Args:
        url: URL that may contain sensitive parameters

    Returns:
        URL with sensitive parameters replaced with [REDACTED]

    Examples:
        >>> sanitize_url("https://b.s3.amazonaws.com/k?X-Amz-Expires=900&X-Amz-Signature=abc")
        'https://b.s3.amazonaws.com/k?X-Amz-Expires=900&X-Amz-Signature=[REDACTED]'
    """
    if not url:
        return url

    try:
        parsed = urlparse(url)
    except ValueError:
        return url

    if not parsed.query:
        return url

    sanitized_params = []
    for param in parsed.query.split("&"):
        if "=" in param:
            key, _ = param.split("=", 1)
            if key.lower() in SENSITIVE_PARAMS:
                sanitized_params.append(f"{key}=[REDACTED]")
            else:
                sanitized_params.append(param)
        else:
            sanitized_params.append(param)

    return urlunparse(parsed._replace(query="&".join(sanitized_params)))


# ---------------------------------------------------------------------------
# Error Message Sanitization
# ---------------------------------------------------------------------------

SENSITIVE_PATTERNS = [
    (
        re.compile(r'x-amz-signature=[^&\s"\']+', re.IGNORECASE),
        "X-Amz-Signature=[REDACTED]",
    ),
    (
        re.compile(r'x-amz-credential=[^&\s"\']+', re.IGNORECASE),
        "X-Amz-Credential=[REDACTED]",
    ),
    (
        re.compile(r'x-amz-security-token=[^&\s"\']+', re.IGNORECASE),
        "X-Amz-Security-Token=[REDACTED]",
    ),
    (re.compile(r'aws_secret_access_key[=:]\s*[^\s"\'&]+', re.IGNORECASE), "aws_secret_access_key=[REDACTED]"),
]

URL_PATTERN = re.compile(r'https?://[^\s"\'<>]+')


def sanitize_error_message(msg: str, max_length: int = 500) -> str:
    """
    Remove potentially sensitive data from error messages.

    Applies pattern-based redaction and truncates to max_length.

    Args:
        msg: Error message that may contain sensitive data
        max_length: Maximum length of returned message

    Returns:
        Sanitized and truncated error message
    """
    if not msg:
        return msg

    for pattern, replacement in SENSITIVE_PATTERNS:
        msg = pattern.sub(replacement, msg)

    for match in URL_PATTERN.finditer(msg):
        original_url = match.group(0)
        sanitized = sanitize_url(original_url)
        if sanitized != original_url:
            msg = msg.replace(original_url, sanitized)

    if len(msg) > max_length:
        msg = msg[: max_length - 3] + "..."

    return msg

"""Page fetching with SSRF protection."""
from __future__ import annotations

import re
import socket
import time
from dataclasses import dataclass
from ipaddress import ip_address
from urllib.parse import urljoin, urlparse

import requests

from aimapper.config.settings import settings
from aimapper.logging import get_logger

logger = get_logger(__name__)

_SCHEME = re.compile(r"^https?://", re.I)


@dataclass
class FetchResult:
    """Body and transport facts of one fetched resource."""
    body: str
    status_code: int
    final_url: str
    content_type: str = ""
    elapsed_ms: int = 0
    redirects: int = 0


def is_url(source: str) -> bool:
    parsed = urlparse(source)
    return parsed.scheme in {"http", "https"}


def normalize_url(value: str) -> str:
    """Add ``https://`` to bare hostnames and check the result is an http(s) URL.

    Raises:
        ValueError: If the value cannot be turned into an http(s) URL
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("URL is required")
    if "://" not in value and not _SCHEME.match(value):
        value = f"https://{value}"
    if not is_url(value):
        raise ValueError("Only http and https URLs are allowed")
    if not urlparse(value).hostname:
        raise ValueError("Invalid URL: hostname not found")
    return value


def _validate_ip(ip_str: str) -> tuple[bool, str]:
    """Check if an IP address is safe (not private/internal)."""
    try:
        ip = ip_address(ip_str)
    except ValueError:
        return False, f"Invalid IP address: {ip_str}"
    if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local or ip.is_multicast:
        return False, f"Access to private/internal IP addresses is forbidden: {ip_str}"
    return True, ""


def _resolve_and_validate_url(url: str) -> str:
    """Resolve the URL's hostname and return an error message, or "" if safe.

    There is a small window between this check and the request itself;
    DNS rebinding would need attacker-controlled DNS and is accepted.
    """
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"}:
        return "Only http and https schemes are allowed"

    hostname = parsed.hostname
    if not hostname:
        return "Invalid URL: hostname not found"

    try:
        resolved_ip = socket.gethostbyname(hostname)
    except (socket.gaierror, UnicodeError):
        return f"Could not resolve hostname: {hostname}"

    _, error_msg = _validate_ip(resolved_ip)
    return error_msg


def _check_declared_size(response: requests.Response, max_size: int) -> None:
    content_length = response.headers.get("Content-Length")
    if content_length and content_length.isdigit() and int(content_length) > max_size:
        response.close()
        raise ValueError(f"Response too large: {int(content_length)} bytes (max {max_size})")


def _read_body(response: requests.Response, max_size: int) -> str:
    chunks = []
    total_size = 0
    for chunk in response.iter_content(chunk_size=8192, decode_unicode=False):
        total_size += len(chunk)
        if total_size > max_size:
            response.close()
            raise ValueError(f"Response too large: exceeded {max_size} bytes")
        chunks.append(chunk)

    content_bytes = b"".join(chunks)
    encoding = response.encoding or "utf-8"
    try:
        return content_bytes.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        return content_bytes.decode("utf-8", errors="replace")


def safe_get(
    url: str,
    *,
    timeout: float,
    max_redirects: int,
    max_size: int | None = None,
) -> FetchResult:
    """GET a URL, validating the target and every redirect hop.

    Redirects are followed manually so each ``Location`` is checked against
    the private-address blocklist before it is requested. Non-2xx responses
    are returned, not raised.

    Raises:
        ValueError: If a URL is blocked or the response is too large
        requests.RequestException: On transport failures
    """
    max_size = max_size or settings.fetcher.max_response_size
    headers = {"User-Agent": settings.fetcher.user_agent}

    error_msg = _resolve_and_validate_url(url)
    if error_msg:
        raise ValueError(f"SSRF protection: {error_msg}")

    started = time.perf_counter()
    response = requests.get(url, timeout=timeout, allow_redirects=False, stream=True, headers=headers)
    _check_declared_size(response, max_size)

    redirects = 0
    while response.is_redirect and redirects < max_redirects:
        location = response.headers.get("Location", "")
        if not location:
            break
        redirects += 1
        next_url = urljoin(url, location)

        error_msg = _resolve_and_validate_url(next_url)
        if error_msg:
            response.close()
            raise ValueError(f"SSRF protection: Redirect blocked - {error_msg}")

        response.close()
        response = requests.get(next_url, timeout=timeout, allow_redirects=False, stream=True, headers=headers)
        url = next_url
        _check_declared_size(response, max_size)

    body = _read_body(response, max_size)
    return FetchResult(
        body=body,
        status_code=response.status_code,
        final_url=url,
        content_type=response.headers.get("Content-Type", ""),
        elapsed_ms=round((time.perf_counter() - started) * 1000),
        redirects=redirects,
    )


def fetch_page(source: str) -> FetchResult:
    """Fetch one page for analysis.

    Security measures:
    - Only accepts http/https URLs (no local file paths)
    - Validates resolved IP is not private/internal (SSRF protection)
    - Re-validates every redirect target
    - Limits response size to prevent memory exhaustion

    Raises:
        ValueError: For invalid or blocked URLs and oversized responses
        RuntimeError: When the page cannot be retrieved or returns an error status
    """
    url = normalize_url(source)
    fetcher = settings.fetcher

    try:
        result = safe_get(
            url,
            timeout=fetcher.request_timeout,
            max_redirects=fetcher.max_redirects,
            max_size=fetcher.max_response_size,
        )
    except requests.RequestException as e:
        raise RuntimeError(f"Unable to fetch URL: {e}") from e

    if result.status_code >= 400:
        raise RuntimeError(f"Unable to fetch URL ({result.status_code})")

    logger.info(
        "page_fetched",
        url=result.final_url,
        status_code=result.status_code,
        size=len(result.body),
    )
    return result

"""
HTTP byte source for spreadsheets.

**Conceptual**: A thin wrapper around requests that downloads a spreadsheet
and reports its format. It does NOT decode anything - turning bytes into a
Table is sheetround.data.io's job. Keeping HTTP mechanics here means the
decoder can be tested without a network and this client can be tested with
mocked responses.

**Error handling**: HTTP failures map onto the SourceError family:
  - 401/403 -> SourceAccessError
  - 404 -> SourceNotFoundError
  - 5xx -> SourceServerError
  - other 4xx, connection errors, timeouts -> SourceError
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from sheetround.config.settings import SourceSettings
from sheetround.venues.base import (
    SheetBytes,
    SourceAccessError,
    SourceError,
    SourceNotFoundError,
    SourceServerError,
    format_from_name,
    resolve_format,
)

logger = logging.getLogger(__name__)

# Content types that name a format outright
CONTENT_TYPE_FORMATS = {
    "text/csv": "csv",
    "application/csv": "csv",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
}


class HttpSheetSource:
    """
    Download a spreadsheet over HTTP(S).

    **Example usage**:
        >>> from sheetround.config.settings import get_settings
        >>> settings = get_settings()
        >>> with HttpSheetSource(settings.source) as source:
        ...     sheet = source.fetch()
        >>> sheet.format_tag
        'xlsx'
    """

    def __init__(
        self,
        settings: SourceSettings,
        url: Optional[str] = None,
        format_tag: Optional[str] = None,
    ):
        """
        Args:
            settings: Timeout, user agent and default URL.
            url: URL to fetch; defaults to settings.url.
            format_tag: Force a format instead of inferring it.
        """
        self.settings = settings
        self.url = url or settings.url
        self.format_tag = format_tag
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": self.settings.user_agent,
            "Accept": "*/*",
        })

    def fetch(self) -> SheetBytes:
        """
        GET the URL and return its bytes with a format tag.

        The format is, in order: the explicit format_tag, the URL path
        suffix, the response Content-Type, then byte sniffing.

        Raises:
            SourceAccessError: 401/403.
            SourceNotFoundError: 404.
            SourceServerError: 5xx.
            SourceError: Any other HTTP, connection, or timeout failure.
        """
        logger.info("Fetching sheet from %s", self.url)

        try:
            response = self.session.get(self.url, timeout=self.settings.timeout_seconds)
        except requests.Timeout as e:
            raise SourceError(
                f"Request to {self.url} timed out after {self.settings.timeout_seconds}s. "
                f"Check network connection or increase SHEETROUND_TIMEOUT_SECONDS."
            ) from e
        except requests.ConnectionError as e:
            raise SourceError(
                f"Failed to connect to {self.url}. Check network connection and URL."
            ) from e
        except requests.RequestException as e:
            raise SourceError(f"HTTP request failed: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise SourceAccessError(f"Access to {self.url} refused (status {status}).")
        if status == 404:
            raise SourceNotFoundError(f"Sheet not found at {self.url} (status 404).")
        if status >= 500:
            raise SourceServerError(f"Server error fetching {self.url} (status {status}).")
        if 400 <= status < 500:
            raise SourceError(f"Client error fetching {self.url} (status {status}).")

        payload = response.content
        hint = self.format_tag or self._format_from_content_type(response)
        format_tag = resolve_format(urlparse(self.url).path, payload, hint=hint)

        logger.info("Fetched %d bytes from %s (%s)", len(payload), self.url, format_tag)
        return SheetBytes(payload=payload, format_tag=format_tag, name=self.url)

    def _format_from_content_type(self, response: requests.Response) -> Optional[str]:
        # A recognised URL suffix wins over the header
        if format_from_name(urlparse(self.url).path):
            return None
        content_type = response.headers.get("Content-Type", "")
        media_type = content_type.split(";", 1)[0].strip().lower()
        return CONTENT_TYPE_FORMATS.get(media_type)

    def close(self):
        """Close the HTTP session and release pooled connections."""
        self.session.close()

    def __enter__(self):
        """Enable context manager support (with statement)."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Clean up session when exiting context manager."""
        self.close()
        return False

"""HTTP transport for update checks built on requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime, parsedate_to_datetime
from typing import Mapping, Protocol

import requests
from requests.exceptions import RequestException, Timeout

from cannon_core import __version__

from .errors import TransportError
from .models import GetResponse, HeadResponse, to_utc

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = f"cannon/{__version__}"


class Transport(Protocol):
    def head(self, location: str, if_modified_since: datetime | None = None) -> HeadResponse: ...

    def get(self, location: str) -> GetResponse: ...


@dataclass(frozen=True)
class TransportConfig:
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT


def http_date(value: datetime) -> str:
    return format_datetime(to_utc(value), usegmt=True)


def parse_http_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return to_utc(parsedate_to_datetime(value))
    except (TypeError, ValueError, IndexError):
        logger.debug("ignoring unparsable Last-Modified header %r", value)
        return None


def _headers(response: requests.Response) -> dict[str, str]:
    return {str(key): str(value) for key, value in response.headers.items()}


class HttpTransport:
    """Single-shot HEAD/GET requests: fixed timeout, no proxy, no retries."""

    def __init__(
        self,
        config: TransportConfig | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or TransportConfig()
        self.session = session or requests.Session()
        # never route update checks through system proxies
        self.session.trust_env = False
        self.session.proxies.clear()
        self.session.headers["User-Agent"] = self.config.user_agent

    def head(self, location: str, if_modified_since: datetime | None = None) -> HeadResponse:
        headers: dict[str, str] = {}
        if if_modified_since is not None:
            headers["If-Modified-Since"] = http_date(if_modified_since)
        response = self._send("HEAD", location, headers)
        return HeadResponse(
            status=response.status_code,
            headers=_headers(response),
            content_type=response.headers.get("Content-Type"),
            last_modified=parse_http_date(response.headers.get("Last-Modified")),
        )

    def get(self, location: str) -> GetResponse:
        response = self._send("GET", location, {})
        return GetResponse(
            status=response.status_code,
            body=response.content,
            headers=_headers(response),
            content_type=response.headers.get("Content-Type"),
            last_modified=parse_http_date(response.headers.get("Last-Modified")),
        )

    def _send(self, method: str, location: str, headers: Mapping[str, str]) -> requests.Response:
        logger.debug("%s %s headers=%s", method, location, dict(headers))
        try:
            response = self.session.request(
                method,
                location,
                headers=dict(headers),
                timeout=self.config.timeout_seconds,
                allow_redirects=True,
            )
        except Timeout as exc:
            raise TransportError(
                f"{method} {location} timed out after {self.config.timeout_seconds:.1f}s",
                location=location,
            ) from exc
        except RequestException as exc:
            raise TransportError(f"{method} {location} failed: {exc}", location=location) from exc
        logger.debug("%s %s -> %s", method, location, response.status_code)
        return response

    def close(self) -> None:
        self.session.close()

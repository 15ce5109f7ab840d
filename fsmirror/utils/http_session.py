"""HTTP session management for the remote file store API."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from ..exceptions import ErrorContext, NetworkError, classify_exception

log = logging.getLogger(__name__)

CHUNK = 64 * 1024
DOWNLOAD_ENDPOINT = "/ng/api/file-store/files/{identifier}/download"


@dataclass
class RemoteResponse:
    """Status, fully-read body and headers of one remote call."""
    status_code: int
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def create_session(pool_maxsize: int = 10, verify_ssl: bool = True) -> requests.Session:
    """Create a session with a connection pool and no automatic retries."""
    session = requests.Session()

    adapter = HTTPAdapter(
        pool_connections=pool_maxsize,
        pool_maxsize=pool_maxsize,
        max_retries=0,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = verify_ssl

    session.headers.update(
        {
            "User-Agent": "fsmirror/1.0 (requests)",
            "Accept": "application/octet-stream, application/json, */*;q=0.9",
            "Connection": "keep-alive",
        }
    )
    return session


class FileStoreClient:
    """Authenticated client for the file store download API.

    One ``requests.Session`` is shared by every worker; the connection pool
    should be at least as large as the worker count.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30,
        pool_maxsize: int = 10,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._session = session
        self._session_config = {"pool_maxsize": pool_maxsize, "verify_ssl": verify_ssl}
        self._lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        with self._lock:
            if self._session is None:
                self._session = create_session(**self._session_config)
                log.debug("Created new HTTP session for: %s", self.base_url)
            return self._session

    def download_url(self, identifier: str) -> str:
        return self.base_url + DOWNLOAD_ENDPOINT.format(identifier=quote(identifier, safe=""))

    def fetch(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> RemoteResponse:
        """GET ``url`` and read the whole body.

        Raises:
            NetworkError: Transport failure, timeout, or ``cancel_event`` was set
                before the body was fully read.
        """
        timeout = timeout or self.timeout
        context = ErrorContext(operation="fetch", url=url)

        if cancel_event is not None and cancel_event.is_set():
            raise NetworkError("Download cancelled before request", url=url, cancelled=True, context=context)

        try:
            resp = self.session.get(
                url,
                params=params,
                headers={"x-api-key": self.api_key},
                stream=True,
                timeout=timeout,
            )
            try:
                chunks = []
                for chunk in resp.iter_content(CHUNK):
                    if cancel_event is not None and cancel_event.is_set():
                        raise NetworkError(
                            "Download cancelled while reading body",
                            url=url,
                            cancelled=True,
                            context=context,
                        )
                    if chunk:
                        chunks.append(chunk)
            finally:
                resp.close()

            return RemoteResponse(
                status_code=resp.status_code,
                body=b"".join(chunks),
                headers=dict(resp.headers or {}),
                reason=resp.reason or "",
            )
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Timeout after {timeout}s fetching {url}", url=url, timeout=timeout, cause=exc, context=context
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise classify_exception(exc, context) from exc

    def close(self) -> None:
        with self._lock:
            if self._session is not None:
                self._session.close()
                log.debug("Closed HTTP session for: %s", self.base_url)
                self._session = None

    def __enter__(self) -> FileStoreClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

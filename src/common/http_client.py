"""Session-scoped HTTP transport used by the repository clients.

Encapsulates request/timeout handling so the downloader, normalizer and
artifact downloader avoid duplicating try/except blocks. One transport is
created per resolution session and closed with it; nothing here is global.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

Credentials = Optional[Tuple[str, str]]


class HttpTransport:
    """Blocking HTTP client with bounded retry on timeouts only.

    Timeouts (``requests.Timeout``) are retried up to ``retry_max`` attempts in
    total with a fixed wait. Every other ``requests.RequestException`` is raised
    on the first attempt so callers can move on to the next repository.
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        retry_max: Optional[int] = None,
        retry_delay: Optional[float] = None,
        verify: Any = True,
    ):
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self.timeout = Constants.REQUEST_TIMEOUT if timeout is None else timeout
        self.retry_max = max(1, Constants.HTTP_RETRY_MAX if retry_max is None else retry_max)
        self.retry_delay = Constants.HTTP_RETRY_BASE_DELAY_SEC if retry_delay is None else retry_delay
        self.verify = verify

    def _retrying(self) -> Retrying:
        return Retrying(
            retry=retry_if_exception_type(requests.Timeout),
            stop=stop_after_attempt(self.retry_max),
            wait=wait_fixed(self.retry_delay),
            reraise=True,
        )

    def _send(self, method: str, url: str, *, auth: Credentials, context: str, **kwargs: Any) -> requests.Response:
        safe_target = safe_url(url)
        headers = {"User-Agent": Constants.USER_AGENT}
        headers.update(kwargs.pop("headers", None) or {})
        call = getattr(self._session, method.lower())
        for attempt in self._retrying():
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                with Timer() as t:
                    if is_debug_enabled(logger):
                        logger.debug(
                            "HTTP request",
                            extra=extra_context(
                                event="http_request",
                                component="http_client",
                                action=method,
                                target=safe_target,
                                context=context,
                                attempt=attempt_number,
                            ),
                        )
                    try:
                        res = call(
                            url,
                            timeout=self.timeout,
                            auth=auth,
                            headers=headers,
                            verify=self.verify,
                            **kwargs,
                        )
                    except requests.Timeout:
                        logger.debug(
                            "HTTP timeout",
                            extra=extra_context(
                                event="http_exception",
                                component="http_client",
                                action=method,
                                outcome="timeout",
                                attempt=attempt_number,
                                target=safe_target,
                            ),
                        )
                        raise
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP response",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action=method,
                            status_code=res.status_code,
                            duration_ms=t.duration_ms(),
                            target=safe_target,
                            context=context,
                        ),
                    )
                return res
        raise AssertionError("unreachable: tenacity re-raises the last timeout")

    def get(self, url: str, *, auth: Credentials = None, context: str = "maven", **kwargs: Any) -> requests.Response:
        """Perform a GET request; the caller closes streamed responses."""
        return self._send("GET", url, auth=auth, context=context, **kwargs)

    def head(self, url: str, *, auth: Credentials = None, context: str = "maven", **kwargs: Any) -> requests.Response:
        """Perform a HEAD request, following redirects."""
        kwargs.setdefault("allow_redirects", True)
        return self._send("HEAD", url, auth=auth, context=context, **kwargs)

    def close(self) -> None:
        """Close the underlying session when this transport created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

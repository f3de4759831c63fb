"""
Retry/backoff discipline wrapped around every Slack HTTP call

A call is one logical operation: a send function that issues the HTTP
request (rebuilt on each attempt) and an optional classify hook that turns a
successful response into a result or raises a SlackEmojiError. Transport and
status failures are retried with jittered exponential backoff until the maximum
elapsed time runs out; errors marked non-retryable stop the loop at once.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import requests
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential_jitter,
)

from .errors import ErrorKind, SlackEmojiError

logger = logging.getLogger("slack_emoji_upload.transport")

REQUEST_TIMEOUT = 30
DEFAULT_RETRY_AFTER = 1


@dataclass(frozen=True)
class RetryPolicy:
    initial_interval: float = 0.5
    multiplier: float = 1.5
    max_interval: float = 60.0
    max_elapsed: float = 15 * 60.0
    max_attempts: Optional[int] = None
    jitter: float = 0.25

    def retrying(self, operation, sleep=time.sleep):
        """Build a fresh backoff loop for one operation"""
        stop = stop_after_delay(self.max_elapsed)
        if self.max_attempts is not None:
            stop = stop | stop_after_attempt(self.max_attempts)

        def notify(retry_state):
            logger.warning(
                "%s temporarily failed and will be retried, error: %s, backoff delay: %.2fs",
                operation,
                retry_state.outcome.exception(),
                retry_state.next_action.sleep,
            )

        return Retrying(
            stop=stop,
            wait=wait_exponential_jitter(
                initial=self.initial_interval,
                exp_base=self.multiplier,
                max=self.max_interval,
                jitter=self.jitter,
            ),
            retry=retry_if_exception(_is_retryable),
            before_sleep=notify,
            sleep=sleep,
        )


def _is_retryable(exc):
    return isinstance(exc, SlackEmojiError) and exc.retryable


def retry_after_seconds(response):
    """Read the Retry-After header of a 429 response as seconds"""
    raw = response.headers.get("Retry-After")
    if raw is None:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = float(raw.strip())
    except ValueError as exc:
        raise SlackEmojiError(
            ErrorKind.PARSE_FAILURE, f"invalid Retry-After header: {raw!r}", cause=exc
        ) from exc
    if not math.isfinite(seconds) or seconds < 0:
        raise SlackEmojiError(ErrorKind.PARSE_FAILURE, f"invalid Retry-After header: {raw!r}")
    return seconds


def check_status(response, classify=None):
    """Raise for 4xx/5xx responses, letting classify flag permanent 4xx payloads"""
    status = response.status_code
    if 500 <= status < 600:
        raise SlackEmojiError(
            ErrorKind.SERVER_ERROR,
            f"response contains server error, status: {status}, url: {response.url}",
            retryable=True,
        )
    if 400 <= status < 500:
        kind = ErrorKind.RATE_LIMITED if status == 429 else ErrorKind.CLIENT_ERROR
        if classify is not None:
            try:
                classify(response)
            except SlackEmojiError as exc:
                if not exc.retryable and exc.kind is not ErrorKind.PARSE_FAILURE:
                    raise
        raise SlackEmojiError(
            kind,
            f"response contains client error, status: {status}, url: {response.url}",
            retryable=True,
        )


class Transport:
    """Issues backoff-governed requests over one shared requests session"""

    def __init__(
        self, session, policy=None, sleep=time.sleep, timeout=REQUEST_TIMEOUT, cookie=None, cookie_host=None
    ):
        self.session = session
        self.cookie = cookie
        self.cookie_host = cookie_host
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.timeout = timeout

    def headers_for(self, url):
        """The session cookie goes to the workspace host only"""
        if self.cookie and urlparse(url).netloc == self.cookie_host:
            return {"Cookie": self.cookie}
        return {}

    def get(self, url, **kwargs):
        return self.session.get(url, headers=self.headers_for(url), timeout=self.timeout, **kwargs)

    def post(self, url, **kwargs):
        return self.session.post(url, headers=self.headers_for(url), timeout=self.timeout, **kwargs)

    def call(self, operation, send, classify=None, honor_retry_after=False):
        """Run send under a fresh backoff loop and return the classified result

        With honor_retry_after a 429 response is answered by sleeping for its
        Retry-After value and sending exactly once more; that second attempt
        is final whatever its outcome.
        """
        retrying = self.policy.retrying(operation, sleep=self.sleep)
        try:
            return retrying(self._attempt, operation, send, classify, honor_retry_after)
        except RetryError as exc:
            last = exc.last_attempt.exception()
            raise SlackEmojiError(
                ErrorKind.EXHAUSTED,
                f"{operation} gave up after {exc.last_attempt.attempt_number} attempts",
                cause=last,
            ) from last

    def _attempt(self, operation, send, classify, honor_retry_after):
        response = self._send(operation, send)
        if honor_retry_after and response.status_code == 429:
            return self._after_rate_limit(operation, send, classify, response)

        check_status(response, classify)
        return classify(response) if classify is not None else response

    def _after_rate_limit(self, operation, send, classify, response):
        delay = retry_after_seconds(response)
        logger.info("%s rate limited, waiting %.0fs before the final attempt", operation, delay)
        self.sleep(delay)
        try:
            response = self._send(operation, send)
            check_status(response, classify)
            return classify(response) if classify is not None else response
        except SlackEmojiError as exc:
            exc.retryable = False
            raise

    def _send(self, operation, send):
        try:
            response = send()
        except requests.RequestException as exc:
            raise SlackEmojiError(
                ErrorKind.TRANSPORT_FAILURE, f"{operation} request failed", cause=exc, retryable=True
            ) from exc
        logger.debug("%s -> %s %s", operation, response.status_code, response.url)
        return response


def parse_json(response, operation):
    """Decode a JSON body, raising PARSE_FAILURE on malformed content"""
    try:
        payload = response.json()
    except ValueError as exc:
        raise SlackEmojiError(
            ErrorKind.PARSE_FAILURE,
            f"{operation} returned malformed JSON: {response.text[:200]!r}",
            cause=exc,
        ) from exc
    if not isinstance(payload, dict):
        raise SlackEmojiError(ErrorKind.PARSE_FAILURE, f"{operation} returned a non-object JSON body")
    ok = payload.get("ok")
    if not isinstance(ok, bool):
        raise SlackEmojiError(ErrorKind.PARSE_FAILURE, f"{operation} response has no boolean ok flag")
    return payload

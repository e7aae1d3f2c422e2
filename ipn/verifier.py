"""
PayPal IPN verification

Echoes a received Instant Payment Notification back to PayPal behind
``cmd=_notify-validate`` and interprets the literal answer:

- ``VERIFIED``: the notification is authentic
- ``INVALID``: it is not, ``InvalidResponseException`` is raised
- anything else: returned as an UNKNOWN verdict, or rejected with
  ``UnexpectedResponseError`` when the verifier is strict

Example:

    verifier = IPNVerifier().sandbox().ssl()
    try:
        verdict = verifier.verify(raw_body)
    except InvalidResponseException:
        ...
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum

import requests
import structlog

from core.logging import IPNEvents
from core.metrics import ipn_verification_latency, ipn_verifications
from core.settings import Settings
from ipn.errors import InvalidResponseException, TransportError, UnexpectedResponseError
from ipn.payload import decode, encode, to_bytes

PAYPAL_HOST = "www.paypal.com"
SANDBOX_HOST = "www.sandbox.paypal.com"

PATH = "/cgi-bin/webscr"

NON_SSL = "http://"
SSL = "https://"

VERIFIED = "VERIFIED"
INVALID = "INVALID"

log = structlog.get_logger(__name__)


class VerdictStatus(str, Enum):
    verified = "verified"
    invalid = "invalid"
    unknown = "unknown"


@dataclass(frozen=True)
class Verdict:
    status: VerdictStatus
    response: str
    notification: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_response(cls, response: str, notification: dict[str, str] | None = None):
        """Classify a raw response body by exact comparison with the two literals."""
        if response == VERIFIED:
            status = VerdictStatus.verified
        elif response == INVALID:
            status = VerdictStatus.invalid
        else:
            status = VerdictStatus.unknown
        return cls(status=status, response=response, notification=notification or {})

    @property
    def is_verified(self) -> bool:
        return self.status is VerdictStatus.verified


@dataclass(frozen=True)
class VerifierConfig:
    """Where and how to reach the verification endpoint. Sandbox and SSL are off by default."""

    sandbox: bool = False
    ssl: bool = False
    strict: bool = False
    timeout: float | None = 30.0
    user_agent: str = "paypal-ipn-verifier/1.0"

    @property
    def host(self) -> str:
        return SANDBOX_HOST if self.sandbox else PAYPAL_HOST

    @property
    def scheme(self) -> str:
        return SSL if self.ssl else NON_SSL

    @property
    def uri(self) -> str:
        return f"{self.scheme}{self.host}{PATH}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "VerifierConfig":
        return cls(
            sandbox=settings.PAYPAL_IPN_SANDBOX,
            ssl=settings.PAYPAL_IPN_SSL,
            strict=settings.PAYPAL_IPN_STRICT,
            timeout=settings.PAYPAL_IPN_TIMEOUT,
            user_agent=settings.PAYPAL_IPN_USER_AGENT,
        )


# Sentinel for "use the configured timeout"; None disables the deadline
_CONFIGURED = object()


class IPNVerifier:
    def __init__(
        self,
        config: VerifierConfig | None = None,
        *,
        sandbox: bool | None = None,
        ssl: bool | None = None,
        session_factory: Callable[[], requests.Session] | None = None,
    ):
        config = config or VerifierConfig()
        if sandbox is not None:
            config = replace(config, sandbox=sandbox)
        if ssl is not None:
            config = replace(config, ssl=ssl)
        self.config = config
        self.session_factory = session_factory

    def __repr__(self) -> str:
        return f"IPNVerifier({self.config!r})"

    # Builder-style toggles return a new verifier

    def _with(self, **changes) -> "IPNVerifier":
        return IPNVerifier(
            replace(self.config, **changes), session_factory=self.session_factory
        )

    def sandbox(self, active: bool = True) -> "IPNVerifier":
        return self._with(sandbox=active)

    def ssl(self, active: bool = True) -> "IPNVerifier":
        return self._with(ssl=active)

    def strict(self, active: bool = True) -> "IPNVerifier":
        return self._with(strict=active)

    def verify(
        self,
        raw_body: bytes | str,
        *,
        config: VerifierConfig | None = None,
        timeout: float | None = _CONFIGURED,
    ) -> Verdict:
        """
        Verify a notification with PayPal.

        The timeout bounds the whole call: connecting, sending and reading the
        body. It is checked between reads, so a call may overrun it by at most
        one socket read, which is itself bounded by the same timeout.

        Args:
            raw_body: Raw POST body exactly as PayPal delivered it
            config: Optional configuration for this call only
            timeout: Per-call deadline in seconds overriding the configured one; None disables it

        Returns:
            Verdict for the notification

        Raises:
            TransportError: the endpoint could not be reached, timed out or returned an error status
            InvalidResponseException: PayPal answered INVALID
            UnexpectedResponseError: strict mode and PayPal answered neither VERIFIED nor INVALID
        """
        config = config or self.config
        if timeout is _CONFIGURED:
            timeout = config.timeout
        notification = decode(raw_body)
        message = encode(notification)
        uri = config.uri

        log.info(
            IPNEvents.VERIFICATION_REQUEST,
            uri=uri,
            fields=len(notification),
            txn_id=notification.get("txn_id"),
        )
        response = self._post(uri, message, config, timeout)
        verdict = Verdict.from_response(response, notification)

        if verdict.status is VerdictStatus.invalid:
            ipn_verifications.labels(outcome="invalid").inc()
            log.warning(IPNEvents.INVALID, uri=uri, txn_id=notification.get("txn_id"))
            raise InvalidResponseException(response)

        if verdict.status is VerdictStatus.unknown:
            log.warning(IPNEvents.UNEXPECTED, uri=uri, response=response[:200])
            if config.strict:
                ipn_verifications.labels(outcome="unexpected").inc()
                raise UnexpectedResponseError(response)
            ipn_verifications.labels(outcome="unknown").inc()
            return verdict

        ipn_verifications.labels(outcome="verified").inc()
        log.info(IPNEvents.VERIFIED, uri=uri, txn_id=notification.get("txn_id"))
        return verdict

    def _post(
        self, uri: str, message: str, config: VerifierConfig, timeout: float | None
    ) -> str:
        headers = {
            "Connection": "close",
            "Content-Type": "application/x-www-form-urlencoded",
            "User-Agent": config.user_agent,
        }
        session_factory = self.session_factory or requests.Session
        started = time.perf_counter()
        deadline = None if timeout is None else time.monotonic() + timeout
        try:
            # A fresh session per call: the connection is never reused
            with session_factory() as session:
                r = session.post(
                    uri,
                    data=to_bytes(message),
                    headers=headers,
                    timeout=timeout,
                    verify=True,
                    allow_redirects=False,
                    stream=True,
                )
                if 300 <= r.status_code < 400:
                    raise requests.HTTPError(
                        f"{r.status_code} redirect to {r.headers.get('Location')}",
                        response=r,
                    )
                r.raise_for_status()
                return self._read(r, deadline, timeout)
        except requests.RequestException as e:
            ipn_verifications.labels(outcome="transport_error").inc()
            log.error(IPNEvents.TRANSPORT_ERROR, uri=uri, error=str(e))
            raise TransportError(uri, str(e)) from e
        finally:
            ipn_verification_latency.observe(time.perf_counter() - started)

    @staticmethod
    def _read(r: requests.Response, deadline: float | None, timeout: float | None) -> str:
        chunks = []
        for chunk in r.iter_content(chunk_size=1024):
            if deadline is not None and time.monotonic() > deadline:
                raise requests.Timeout(f"response not read within {timeout}s")
            chunks.append(chunk)
        return b"".join(chunks).decode(r.encoding or "utf-8", errors="replace")


def verify(raw_body: bytes | str, **kwargs) -> Verdict:
    """Verify with a one-off verifier; keyword arguments are VerifierConfig fields."""
    return IPNVerifier(VerifierConfig(**kwargs)).verify(raw_body)

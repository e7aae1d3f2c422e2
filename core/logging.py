"""
Structured logging for the IPN verifier and its listener.

Events are rendered as JSON under test and production and as coloured
console lines in development. The HTTP client libraries are held at WARNING
so a verification round trip logs only the ``IPNEvents`` below.
"""

import logging
import os
import sys

import structlog
from opentelemetry.instrumentation.logging import LoggingInstrumentor

# Event dicts recorded while ENVIRONMENT=test, newest last
test_output = []

# Connection chatter from the verification request
QUIET_LOGGERS = ("urllib3", "urllib3.connectionpool", "requests", "charset_normalizer")


class IPNEvents:
    """Event names emitted by the verifier and the listener"""

    API_ENTRY = "api.request"
    RECEIVED = "ipn.received"
    VERIFICATION_REQUEST = "ipn.verification.request"
    VERIFIED = "ipn.verified"
    INVALID = "ipn.invalid"
    UNEXPECTED = "ipn.unexpected"
    TRANSPORT_ERROR = "ipn.transport_error"

    # Outcomes that end a verification, one per call
    OUTCOMES = frozenset({VERIFIED, INVALID, UNEXPECTED, TRANSPORT_ERROR})


def _environment() -> str:
    return os.getenv("ENVIRONMENT", "development")


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_renderer():
    if _environment() in ("test", "production"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True, sort_keys=False)


def test_output_processor(logger, method_name, event_dict):
    """Keep a copy of each event for assertions when ENVIRONMENT=test"""
    if _environment() == "test":
        test_output.append(event_dict.copy())
    return event_dict


def configure_logging():
    """Set up structlog over stdlib logging with OTEL trace context injected."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.ExceptionPrettyPrinter(),
            test_output_processor,
            get_log_renderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Under test, stdout is where capsys looks
    stream = sys.stdout if _environment() == "test" else sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(get_log_level())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    instrumentor = LoggingInstrumentor()
    if not instrumentor.is_instrumented_by_opentelemetry:
        instrumentor.instrument(set_logging_format=False)


configure_logging()

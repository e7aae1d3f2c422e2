"""
Prometheus metrics for IPN verification.

The verifier records every round trip; ``init_metrics`` exposes them on the
listener application at ``/metrics``.
"""

from prometheus_fastapi_instrumentator import Instrumentator
from prometheus_client import Counter, Histogram

ipn_verifications = Counter(
    "paypal_ipn_verifications_total",
    "Total number of IPN verification round trips",
    ["outcome"],  # verified, invalid, unknown, unexpected, transport_error
)

ipn_verification_latency = Histogram(
    "paypal_ipn_verification_latency_seconds",
    "Time taken for the verification request to PayPal",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)


def init_metrics(app):
    """
    Initialize Prometheus metrics instrumentation for the FastAPI app.

    Args:
        app: FastAPI application instance

    Returns:
        Instrumentator instance
    """
    inst = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
    )
    inst.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
    return inst

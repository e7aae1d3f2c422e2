"""
Webhook handlers for PayPal IPN
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from core.dependencies import get_settings
from core.logging import IPNEvents
from core.settings import Settings
from ipn import (
    InvalidResponseException,
    IPNVerifier,
    TransportError,
    UnexpectedResponseError,
    Verdict,
    VerifierConfig,
)

router = APIRouter()

log = structlog.get_logger(__name__)


def get_verifier(settings: Settings = Depends(get_settings)) -> IPNVerifier:
    return IPNVerifier(VerifierConfig.from_settings(settings))


async def verified_notification(
    request: Request, verifier: IPNVerifier = Depends(get_verifier)
) -> Verdict:
    """Dependency resolving to the verdict of the IPN posted to the current request."""
    payload = await request.body()
    log.info(IPNEvents.RECEIVED, size=len(payload))

    try:
        # verify blocks on the round trip to PayPal
        return await run_in_threadpool(verifier.verify, payload)
    except InvalidResponseException:
        raise HTTPException(status_code=400, detail="Invalid notification")
    except UnexpectedResponseError as e:
        raise HTTPException(
            status_code=502, detail=f"Unexpected verification response: {e.response}"
        )
    except TransportError as e:
        raise HTTPException(status_code=502, detail=e.reason)


@router.post("/webhook/paypal/ipn")
async def paypal_ipn(verdict: Verdict = Depends(verified_notification)):
    return {
        "status": verdict.status.value,
        "txn_id": verdict.notification.get("txn_id"),
    }

# app/routers/webhook.py
import asyncio
import json

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from app.core.logging_config import get_logger
from app.core.relay import verify_signature
from app.core.services import Services, get_services
from app.schemas.webhook import WebhookBody

logger = get_logger("webhook")

router = APIRouter()


def parse_events(body: bytes) -> list:
    """Anything that is not a JSON object with a list of events counts as no events."""
    try:
        payload = WebhookBody.model_validate(json.loads(body or b"{}"))
    except (ValueError, ValidationError):
        return []
    return payload.events


@router.get("", response_class=PlainTextResponse)
def webhook_check():
    """Lets an operator confirm the webhook path from a browser. LINE itself only POSTs."""
    return "webhook ok"


@router.post("")
async def receive_webhook(request: Request, services: Services = Depends(get_services)):
    """
    LINE webhook endpoint.

    - **401** only when the `X-Line-Signature` check fails.
    - **200** otherwise, including for LINE's "Verify" ping (`events: []`) and
      for events that failed internally: a non-2xx here makes LINE retry and alert.
    """
    body = await request.body()
    signature = request.headers.get("X-Line-Signature")

    valid, reason = verify_signature(services.settings.line_channel_secret, body, signature)
    if not valid:
        logger.warning("[LINE] signature rejected: %s", reason)
        return PlainTextResponse("Invalid LINE signature", status_code=401)

    events = parse_events(body)
    if not events:
        return Response(status_code=200)

    results = await asyncio.gather(
        *(run_in_threadpool(services.pipeline.process_event, event) for event in events),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            logger.error("[WEBHOOK] handler error: %r", result)

    return Response(status_code=200)

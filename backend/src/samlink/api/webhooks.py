"""CRM webhook endpoint."""

from typing import Any

import pydantic
from fastapi import APIRouter, Body, Depends

from ..services.webhook import parse_events
from . import ValidationError
from .deps import Services, get_services

router = APIRouter(prefix="/webhooks")


@router.post("/company")
async def company_webhook(
    payload: Any = Body(...),
    services: Services = Depends(get_services),
):
    """Receive HubSpot company events.

    Responds only after every selected event has been resolved and recorded.
    """
    try:
        events = parse_events(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(
            "Invalid webhook payload",
            details=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
        )

    summary = await services.webhooks.process(events)
    return {"status": "processed", **summary.model_dump()}

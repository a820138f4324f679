"""Routes the messaging channel calls with parsed operations and YES/NO replies."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from rootline.family.pending import is_confirmation
from rootline.family.processor import BatchProcessor, BatchResult

router = APIRouter()
logger = logging.getLogger(__name__)


class BatchRequest(BaseModel):
    operations: list[dict[str, Any]] = Field(default_factory=list)


class MessageRequest(BaseModel):
    text: str


class OutcomeModel(BaseModel):
    op: str
    status: str
    message: str


class BatchResponse(BaseModel):
    reply: str
    outcomes: list[OutcomeModel] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchResponse":
        return cls(
            reply=result.reply,
            outcomes=[
                OutcomeModel(op=o.op, status=o.status, message=o.message)
                for o in result.outcomes
            ],
        )


def _processor(request: Request) -> BatchProcessor:
    return request.app.state.processor


@router.post("/actors/{actor_id}/batches")
async def apply_batch(
    actor_id: str, body: BatchRequest, request: Request
) -> BatchResponse:
    """Apply one message's worth of parsed operations."""
    result = await _processor(request).process(actor_id, body.operations)
    logger.debug(
        "batch_processed",
        extra={"actor.id": actor_id, "operations": len(body.operations)},
    )
    return BatchResponse.from_result(result)


@router.post("/actors/{actor_id}/messages")
async def confirm_message(
    actor_id: str, body: MessageRequest, request: Request
) -> BatchResponse:
    """Handle a YES/NO reply to a pending confirmation."""
    if not is_confirmation(body.text):
        raise HTTPException(
            status_code=422,
            detail="Only YES/NO replies are handled here; send other text to the intent parser.",
        )
    result = await _processor(request).confirm(actor_id, body.text)
    return BatchResponse.from_result(result)

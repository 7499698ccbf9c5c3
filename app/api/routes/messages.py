"""
Message API Routes

Posting, replying, reacting, and paged reads of a channel's messages.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
import logging

from app.api.routes.workspace import get_orchestrator
from app.models.api_responses import (
    ActionResponse,
    PostMessageRequest,
    ReplyMessageRequest,
    SetReactionRequest,
)
from app.services.orchestrator import WorkspaceOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=ActionResponse)
async def post_message(
    body: PostMessageRequest,
    orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.post_message(
        body.channel_id, body.content, body.attachments, body.require_attachments
    )


@router.get("", response_model=ActionResponse)
async def get_messages(
    channel_id: str = Query(..., description="Channel ID"),
    page: int = Query(1, description="1-based page number"),
    page_size: Optional[int] = Query(None, description="Messages per page (default from settings)"),
    orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator),
):
    """
    One page of user messages with reaction and attachment summaries.

    Examples:
    - GET /api/messages?channel_id=19:abc@thread.tacv2
    - GET /api/messages?channel_id=19:abc@thread.tacv2&page=2&page_size=5
    """
    return await orchestrator.get_messages(channel_id, page, page_size)


@router.post("/replies", response_model=ActionResponse)
async def reply_message(
    body: ReplyMessageRequest,
    orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.reply_message(
        body.channel_id,
        body.message_id,
        body.content,
        body.attachments,
        body.require_attachments,
    )


@router.post("/reactions", response_model=ActionResponse)
async def set_reaction(
    body: SetReactionRequest,
    orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.set_reaction(
        body.channel_id, body.message_id, body.reaction, body.reply_id
    )

"""
Workspace API Routes

Authorization, team and channel provisioning, membership, and the action log.
Business failures come back as ActionResponse(success=False); only malformed
requests produce HTTP errors.
"""

from fastapi import APIRouter, Depends, Request
from typing import List
import logging

from app.models.api_responses import (
    ActionResponse,
    AddChannelRequest,
    AddMembersRequest,
    AuthorizeRequest,
    LogEntryResponse,
)
from app.services.orchestrator import WorkspaceOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter()


def get_orchestrator(request: Request) -> WorkspaceOrchestrator:
    """The per-application orchestrator created at startup."""
    return request.app.state.orchestrator


@router.post("/authorize", response_model=ActionResponse)
async def authorize(
    body: AuthorizeRequest,
    orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator),
):
    """Initialize the Graph client with a bearer token, then ensure the team."""
    return await orchestrator.authorize(body.access_token)


@router.post("/team", response_model=ActionResponse)
async def fetch_team(orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator)):
    """Get the system team, creating it on first use."""
    return await orchestrator.fetch_team()


@router.get("/channels", response_model=ActionResponse)
async def list_channels(orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator)):
    return await orchestrator.list_channels()


@router.post("/channels", response_model=ActionResponse)
async def add_channel(
    body: AddChannelRequest,
    orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator),
):
    """Create the private channel if absent and reconcile its members."""
    return await orchestrator.add_channel(body.channel_name, body.member_emails)


@router.post("/members", response_model=ActionResponse)
async def add_members(
    body: AddMembersRequest,
    orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.add_members(body.channel_id, body.member_emails)


@router.get("/logs", response_model=List[LogEntryResponse])
async def get_logs(orchestrator: WorkspaceOrchestrator = Depends(get_orchestrator)):
    """Action history, newest first."""
    return [
        LogEntryResponse(n=entry.n, text=entry.text)
        for entry in orchestrator.action_log.entries()
    ]

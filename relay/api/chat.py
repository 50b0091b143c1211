"""Chat API: relay one message to the first healthy upstream provider."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from relay.core.dependencies import get_client_ip, get_orchestrator
from relay.gateway.orchestrator import FailoverOrchestrator
from relay.schemas.chat import ChatBody, ChatResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

T = TypeVar("T")

DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    """The caller went away before the answer was ready."""


async def run_unless_disconnected(request: Request, work: Awaitable[T]) -> T:
    """Await ``work``, cancelling it if the client disconnects first.

    Only the task for this request is cancelled; the in-flight upstream
    call is abandoned with it.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def chat(
    body: ChatBody,
    request: Request,
    orchestrator: FailoverOrchestrator = Depends(get_orchestrator),
    client_ip: str = Depends(get_client_ip),
):
    try:
        result = await run_unless_disconnected(request, orchestrator.handle(body.to_request(), client_ip))
    except ClientDisconnected:
        logger.info("Client %s disconnected, abandoned chat request", client_ip)
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    return JSONResponse(content=result.to_dict())

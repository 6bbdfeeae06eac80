"""Generation router — idea generation, feedback, session / result retrieval."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ..dependencies import enforce_rate_limit, get_pipeline, get_stores
from ..schemas.request_schema import FeedbackRequest, GenerateRequest
from ..services.auth_dependency import get_optional_user
from ..services.auth_utils import AuthUser
from ..services.pipeline import GenerationPipeline
from ..services.response_formatter import ERROR_MESSAGES
from ..services.storage import Stores

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499

router = APIRouter(
    tags=["Generation"],
    responses={
        400: {"description": "Invalid or unsafe input"},
        500: {"description": "Generation failed after exhausting fallbacks"},
    },
)


@router.post(
    "/generate",
    status_code=status.HTTP_200_OK,
    summary="Generate Business Ideas",
    response_description="Primary idea, alternatives, scores, roadmap and decision support",
    dependencies=[Depends(enforce_rate_limit)],
)
async def generate(
    payload: GenerateRequest,
    request: Request,
    pipeline: GenerationPipeline = Depends(get_pipeline),
    user: Optional[AuthUser] = Depends(get_optional_user),
):
    """Run the generation pipeline.

    The pipeline runs as its own task so a client that hangs up does not
    keep provider calls alive.
    """
    task = asyncio.create_task(pipeline.run(payload, user))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning("[PIPELINE] Client disconnected; cancelling generation")
                task.cancel()
                return Response(status_code=CLIENT_CLOSED_REQUEST)
    finally:
        if not task.done():
            task.cancel()


@router.post("/feedback", summary="Rate a Generated Result")
def submit_feedback(payload: FeedbackRequest, stores: Stores = Depends(get_stores)) -> Dict[str, Any]:
    stores.feedback.append(payload.to_wire())
    logger.info("[FEEDBACK] session=%s rating=%s", payload.session_id, payload.rating)
    return {"status": "ok", "message": "Thank you for your feedback!"}


@router.get("/session/{session_id}", summary="Retrieve a Session")
def get_session(session_id: str, stores: Stores = Depends(get_stores)) -> Dict[str, Any]:
    session = stores.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ERROR_MESSAGES["not_found"])
    return session


@router.get("/result/{result_id}", summary="Retrieve a Generated Result")
def get_result(result_id: str, stores: Stores = Depends(get_stores)) -> Dict[str, Any]:
    result = stores.results.get(result_id)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ERROR_MESSAGES["not_found"])
    return result


@router.get("/admin/feedback-summary", summary="Feedback Statistics")
def feedback_summary(stores: Stores = Depends(get_stores)) -> Dict[str, Any]:
    return stores.feedback.summary()

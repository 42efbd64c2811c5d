"""Pipeline RPC: one POST endpoint per registered pipeline, plus a listing endpoint.

Invariants:
    - Acting user comes ONLY from the X-User-Id header (set by the upstream auth gateway)
    - Body is handed to the pipeline unparsed; the pipeline owns input validation
    - Unknown pipeline name -> 404 before any store access
    - Errors surface through the global TradeHubError handler (api/error_handlers.py)

Design Decisions:
    - Store, notifier and background flag read from app.state (set by the lifespan);
      exposed as dependencies so tests can override them
"""

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Header, Request

from tradehub.core.errors import NotFoundError
from tradehub.core.repository_protocols import NotificationDispatcher, TradeStore
from tradehub.pipelines.engine import PipelineContext
from tradehub.pipelines.registry import PIPELINES, get_pipeline

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/pipelines", tags=["pipelines"])


def get_trade_store(request: Request) -> TradeStore:
    return request.app.state.trade_store


def get_notifier(request: Request) -> NotificationDispatcher | None:
    return getattr(request.app.state, "notifier", None)


def _parse_user_id(raw: str | None) -> UUID | None:
    if not raw:
        return None
    try:
        return UUID(raw)
    except ValueError:
        logger.warning("Rejected malformed X-User-Id header")
        return None


async def get_pipeline_context(
    request: Request,
    store: TradeStore = Depends(get_trade_store),
    notifier: NotificationDispatcher | None = Depends(get_notifier),
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> PipelineContext:
    return PipelineContext(
        acting_user_id=_parse_user_id(x_user_id),
        store=store,
        notifier=notifier,
        background_effects=getattr(request.app.state, "background_effects", False),
    )


@router.get("")
async def list_pipelines():
    """Names and descriptions of every registered pipeline."""
    return {
        "pipelines": [
            {"name": p.name, "description": p.description}
            for p in PIPELINES.values()
        ],
    }


@router.post("/{pipeline_name}")
async def execute_pipeline(
    pipeline_name: str,
    payload: Any = Body(default=None),
    context: PipelineContext = Depends(get_pipeline_context),
):
    """Run one pipeline and return its validated result."""
    pipeline = get_pipeline(pipeline_name)
    if pipeline is None:
        raise NotFoundError("Pipeline", pipeline_name)
    result = await pipeline.execute(payload, context)
    return result.model_dump(mode="json")

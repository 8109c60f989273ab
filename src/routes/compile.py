"""Compile routes for visual bot programs."""

import logging

from fastapi import APIRouter, HTTPException

from src.fsm.catalog import (
    EMERGENCY_TRANSITION_KIND,
    ROOT_KIND,
    STATE_KIND,
    STATE_REFERENCE_KIND,
    TACTICAL_TRANSITION_KIND,
)
from src.fsm.errors import CompileError
from src.fsm.registries import STATEMENT_RULES, VALUE_RULES
from src.models.compile_api import (
    BlockKindsResponse,
    CompileErrorDetail,
    CompileRequest,
    CompileResponse,
)
from src.service.compile_service import CompileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/compile", tags=["compile"])

_service = CompileService()


@router.post("", response_model=CompileResponse)
async def compile_workspace(request: CompileRequest) -> CompileResponse:
    """Compile a saved workspace to a program descriptor and JavaScript.

    Malformed workspaces return 422 with the offending block's id and kind.
    """
    try:
        result = _service.compile(request.workspace, include_code=request.include_code)
    except CompileError as e:
        logger.info(f"Compile rejected: {e}")
        detail = CompileErrorDetail(**e.to_dict())
        raise HTTPException(status_code=422, detail=detail.model_dump()) from e
    except Exception as e:
        logger.error(f"Compile failed unexpectedly - {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal compile error") from e

    return CompileResponse(
        program=result.program.model_dump(mode="json", by_alias=True),
        code=result.code,
        duration_ms=result.duration_ms,
    )


@router.get("/kinds", response_model=BlockKindsResponse)
async def list_block_kinds() -> BlockKindsResponse:
    """List the block kinds the compiler understands."""
    return BlockKindsResponse(
        values=sorted(VALUE_RULES),
        statements=sorted(STATEMENT_RULES),
        program=[
            ROOT_KIND,
            STATE_KIND,
            TACTICAL_TRANSITION_KIND,
            EMERGENCY_TRANSITION_KIND,
            STATE_REFERENCE_KIND,
        ],
    )

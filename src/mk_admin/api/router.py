"""Admin REST API — operator only."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_admin.application.service import AdminService
from src.mk_common.database import get_db_session
from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.auth.dependencies import require_operator

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.get("/stats")
async def get_ledger_stats(
    operator: Annotated[str, Depends(require_operator)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_ledger_stats(db)
    return success_response(result)


@router.get("/invariants")
async def verify_invariants(
    operator: Annotated[str, Depends(require_operator)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.verify_all_invariants(db)
    return success_response(result)

"""Marketplace REST endpoints, all require a Bearer token.

GET  /marketplace/listing-fee                  — current listing fee
PUT  /marketplace/listing-fee                  — change fee (operator only)
POST /marketplace/items                        — list a new item
POST /marketplace/items/{item_id}/relist       — relist (stored holder only)
POST /marketplace/items/{item_id}/purchase     — buy and settle
GET  /marketplace/items/unsold                 — items held by the marketplace
GET  /marketplace/items/owned                  — items whose holder is the caller
GET  /marketplace/items/listed                 — items whose seller is the caller
GET  /marketplace/items/{item_id}              — one record + registry metadata
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.database import get_db_session
from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.auth.dependencies import get_current_party
from src.mk_ledger.application.schemas import (
    ListItemRequest,
    PurchaseItemRequest,
    RelistItemRequest,
    SetListingFeeRequest,
)
from src.mk_ledger.application.service import MarketplaceApplicationService

router = APIRouter(prefix="/marketplace", tags=["marketplace"])

_service = MarketplaceApplicationService()


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/listing-fee")
async def get_listing_fee(
    request: Request,
    party: Annotated[str, Depends(get_current_party)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_listing_fee(db)
    return _respond(request, result.model_dump())


@router.put("/listing-fee")
async def set_listing_fee(
    body: SetListingFeeRequest,
    request: Request,
    party: Annotated[str, Depends(get_current_party)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_listing_fee(db, party, body.listing_fee_cents)
    return _respond(request, result.model_dump())


@router.post("/items", status_code=201)
async def list_new_item(
    body: ListItemRequest,
    request: Request,
    party: Annotated[str, Depends(get_current_party)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_new_item(db, party, body)
    return _respond(request, result.model_dump())


@router.post("/items/{item_id}/relist")
async def relist_item(
    item_id: int,
    body: RelistItemRequest,
    request: Request,
    party: Annotated[str, Depends(get_current_party)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.relist_item(db, party, item_id, body)
    return _respond(request, result.model_dump())


@router.post("/items/{item_id}/purchase")
async def purchase_item(
    item_id: int,
    body: PurchaseItemRequest,
    request: Request,
    party: Annotated[str, Depends(get_current_party)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.purchase_item(db, party, item_id, body)
    return _respond(request, result.model_dump())


@router.get("/items/unsold")
async def list_unsold_items(
    request: Request,
    party: Annotated[str, Depends(get_current_party)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_unsold_items(db)
    return _respond(request, result.model_dump())


@router.get("/items/owned")
async def list_owned_items(
    request: Request,
    party: Annotated[str, Depends(get_current_party)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_owned_items(db, party)
    return _respond(request, result.model_dump())


@router.get("/items/listed")
async def list_seller_items(
    request: Request,
    party: Annotated[str, Depends(get_current_party)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_seller_items(db, party)
    return _respond(request, result.model_dump())


@router.get("/items/{item_id}")
async def get_item(
    item_id: int,
    request: Request,
    party: Annotated[str, Depends(get_current_party)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_item(db, item_id)
    return _respond(request, result.model_dump())

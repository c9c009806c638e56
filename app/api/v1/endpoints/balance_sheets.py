"""Balance sheet API endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import CurrentUser, get_current_user
from app.api.errors import http_error
from app.core.errors import DomainError
from app.db.dependencies import get_balance_sheet_service
from app.domain.balance_sheet.service import NOT_FOUND_MESSAGE, BalanceSheetService
from app.schemas.balance_sheet import (
    AccountResponse,
    AuditRequest,
    BalanceSheetCreate,
    BalanceSheetResponse,
    BalanceSheetUpdate,
    ItemCreate,
    ItemResponse,
    ItemUpdate,
    SummaryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[BalanceSheetResponse])
def list_balance_sheets(
    fiscal_year_id: str = "all",
    period_type: str = "all",
    status_filter: str = Query("all", alias="status"),
    search: str = "",
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> List[BalanceSheetResponse]:
    """The active company's balance sheets, latest period first."""
    sheets = service.filter_balance_sheets(
        fiscal_year_id, period_type, status_filter, search, user.company_id
    )
    return [BalanceSheetResponse.model_validate(s) for s in sheets]


@router.get("/accounts", response_model=List[AccountResponse])
def list_accounts(
    type: Optional[str] = None,
    group: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> List[AccountResponse]:
    """Chart of accounts, optionally narrowed by type or group."""
    try:
        if type:
            accounts = service.get_accounts_by_type(type)
        elif group:
            accounts = service.get_accounts_by_group(group)
        else:
            accounts = service.list_accounts(user.company_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [AccountResponse.model_validate(a) for a in accounts]


@router.post("", response_model=BalanceSheetResponse, status_code=status.HTTP_201_CREATED)
def create_balance_sheet(
    data: BalanceSheetCreate,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> BalanceSheetResponse:
    try:
        sheet = service.create_balance_sheet(
            company_id=user.company_id,
            created_by=user.name,
            **data.model_dump(),
        )
    except DomainError as e:
        logger.error(f"Error creating balance sheet: {e}")
        raise http_error(e)
    logger.info(f"Created balance sheet {sheet.id} for period {sheet.period}")
    return BalanceSheetResponse.model_validate(sheet)


@router.get("/{sheet_id}", response_model=BalanceSheetResponse)
def get_balance_sheet(
    sheet_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> BalanceSheetResponse:
    sheet = service.get_balance_sheet(sheet_id)
    if sheet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return BalanceSheetResponse.model_validate(sheet)


@router.patch("/{sheet_id}", response_model=BalanceSheetResponse)
def update_balance_sheet(
    sheet_id: str,
    data: BalanceSheetUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> BalanceSheetResponse:
    try:
        sheet = service.update_balance_sheet(sheet_id, **data.model_dump(exclude_unset=True))
    except DomainError as e:
        raise http_error(e)
    return BalanceSheetResponse.model_validate(sheet)


@router.delete("/{sheet_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_balance_sheet(
    sheet_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> Response:
    """Delete a draft balance sheet together with its items."""
    try:
        service.delete_balance_sheet(sheet_id)
    except DomainError as e:
        logger.error(f"Error deleting balance sheet {sheet_id}: {e}")
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{sheet_id}/publish", response_model=BalanceSheetResponse)
def publish_balance_sheet(
    sheet_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> BalanceSheetResponse:
    try:
        sheet = service.publish_balance_sheet(sheet_id)
    except DomainError as e:
        raise http_error(e)
    return BalanceSheetResponse.model_validate(sheet)


@router.post("/{sheet_id}/audit", response_model=BalanceSheetResponse)
def audit_balance_sheet(
    sheet_id: str,
    data: AuditRequest,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> BalanceSheetResponse:
    """Mark a published sheet audited; the auditor defaults to the current user."""
    try:
        sheet = service.audit_balance_sheet(sheet_id, data.auditor_name or user.name)
    except DomainError as e:
        raise http_error(e)
    return BalanceSheetResponse.model_validate(sheet)


@router.get("/{sheet_id}/summary", response_model=SummaryResponse)
def get_summary(
    sheet_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> SummaryResponse:
    try:
        return SummaryResponse.model_validate(service.get_summary(sheet_id))
    except DomainError as e:
        raise http_error(e)


@router.get("/{sheet_id}/items", response_model=List[ItemResponse])
def list_items(
    sheet_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> List[ItemResponse]:
    return [ItemResponse.model_validate(i) for i in service.get_items(sheet_id)]


@router.post("/{sheet_id}/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def add_item(
    sheet_id: str,
    data: ItemCreate,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> ItemResponse:
    try:
        item = service.add_item(sheet_id, **data.model_dump())
    except DomainError as e:
        logger.error(f"Error adding item to balance sheet {sheet_id}: {e}")
        raise http_error(e)
    return ItemResponse.model_validate(item)


@router.patch("/{sheet_id}/items/{item_id}", response_model=ItemResponse)
def update_item(
    sheet_id: str,
    item_id: str,
    data: ItemUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> ItemResponse:
    try:
        item = service.update_item(sheet_id, item_id, **data.model_dump(exclude_unset=True))
    except DomainError as e:
        raise http_error(e)
    return ItemResponse.model_validate(item)


@router.delete("/{sheet_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    sheet_id: str,
    item_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: BalanceSheetService = Depends(get_balance_sheet_service),
) -> Response:
    try:
        service.delete_item(sheet_id, item_id)
    except DomainError as e:
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

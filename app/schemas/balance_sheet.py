"""Balance sheet schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from app.domain.balance_sheet.enums import AccountType, BalanceSheetStatus, PeriodType


class BalanceSheetCreate(BaseModel):
    """Schema for creating a balance sheet."""
    fiscal_year_id: str
    period: str
    period_type: PeriodType
    notes: Optional[str] = None


class BalanceSheetUpdate(BaseModel):
    fiscal_year_id: Optional[str] = None
    period: Optional[str] = None
    period_type: Optional[PeriodType] = None
    notes: Optional[str] = None


class BalanceSheetResponse(BaseModel):
    """Schema for balance sheet response."""
    id: str
    fiscal_year_id: str
    company_id: str
    period: str
    period_type: PeriodType
    status: BalanceSheetStatus
    created_by: str
    created_at: datetime
    updated_at: datetime
    published_at: Optional[datetime] = None
    audited_at: Optional[datetime] = None
    audited_by: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class ItemCreate(BaseModel):
    account_id: str
    amount: Decimal
    budgeted_amount: Optional[Decimal] = None
    notes: Optional[str] = None


class ItemUpdate(BaseModel):
    amount: Optional[Decimal] = None
    budgeted_amount: Optional[Decimal] = None
    notes: Optional[str] = None


class ItemResponse(BaseModel):
    id: str
    balance_sheet_id: str
    account_id: str
    account_code: str
    account_name: str
    account_type: AccountType
    account_group: str
    amount: Decimal
    budgeted_amount: Optional[Decimal] = None
    variance: Optional[Decimal] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class AuditRequest(BaseModel):
    auditor_name: Optional[str] = None


class AccountResponse(BaseModel):
    id: str
    code: str
    name: str
    type: AccountType
    group: str
    company_id: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class SummaryResponse(BaseModel):
    """Totals and ratios; a ratio is null when its denominator is not positive."""
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_revenue: Decimal
    total_expense: Decimal
    net_income: Decimal
    current_ratio: Optional[float] = None
    quick_ratio: Optional[float] = None
    debt_to_equity_ratio: Optional[float] = None
    return_on_assets: Optional[float] = None
    return_on_equity: Optional[float] = None
    is_balanced: bool

    class Config:
        from_attributes = True

"""Balance sheet models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models.base import TimestampMixin, new_id
from app.domain.balance_sheet.enums import (
    AccountType,
    BalanceSheetStatus,
    PeriodType,
)


@dataclass
class AccountingAccount:
    """Chart of accounts entry."""
    code: str
    name: str
    type: AccountType
    group: str
    company_id: Optional[str] = None
    is_active: bool = True
    id: str = field(default_factory=new_id)


@dataclass
class BalanceSheet(TimestampMixin):
    fiscal_year_id: str = ""
    company_id: str = ""
    period: str = ""  # e.g. 2024-Q1, 2024-06, 2024
    period_type: PeriodType = PeriodType.QUARTERLY
    status: BalanceSheetStatus = BalanceSheetStatus.DRAFT
    created_by: str = ""
    published_at: Optional[datetime] = None
    audited_at: Optional[datetime] = None
    audited_by: Optional[str] = None
    notes: Optional[str] = None
    id: str = field(default_factory=new_id)


@dataclass
class BalanceSheetItem:
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
    id: str = field(default_factory=new_id)

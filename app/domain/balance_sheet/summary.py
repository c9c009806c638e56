"""Balance sheet totals and financial ratios."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from app.models.balance_sheet import BalanceSheetItem
from app.domain.balance_sheet.enums import AccountGroup, AccountType

# Cash and equivalents, accounts receivable
QUICK_ASSET_CODES = ("1.1.1", "1.1.2")
BALANCE_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class BalanceSheetSummary:
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_revenue: Decimal
    total_expense: Decimal
    net_income: Decimal
    current_ratio: Optional[float]
    quick_ratio: Optional[float]
    debt_to_equity_ratio: Optional[float]
    return_on_assets: Optional[float]
    return_on_equity: Optional[float]
    is_balanced: bool


def _total(items, account_type: AccountType, group: Optional[str] = None) -> Decimal:
    return sum(
        (
            i.amount for i in items
            if i.account_type == account_type
            and (group is None or i.account_group == group)
        ),
        Decimal("0"),
    )


def ratio(numerator: Decimal, denominator: Decimal) -> Optional[float]:
    """``numerator / denominator``, or None when the denominator is not positive."""
    if denominator <= 0:
        return None
    return float(numerator / denominator)


def is_balanced(assets: Decimal, liabilities: Decimal, equity: Decimal) -> bool:
    """Accounting equation check: assets == liabilities + equity, to the cent."""
    return abs(assets - (liabilities + equity)) < BALANCE_TOLERANCE


def summarize(items: Iterable[BalanceSheetItem]) -> BalanceSheetSummary:
    """
    Aggregate the items of one balance sheet.

    Ratios with a zero or negative denominator are None rather than
    infinite or NaN.
    """
    items = list(items)
    assets = _total(items, AccountType.ASSET)
    liabilities = _total(items, AccountType.LIABILITY)
    equity = _total(items, AccountType.EQUITY)
    revenue = _total(items, AccountType.REVENUE)
    expense = _total(items, AccountType.EXPENSE)
    net_income = revenue - expense

    current_assets = _total(items, AccountType.ASSET, AccountGroup.CURRENT_ASSETS.value)
    current_liabilities = _total(
        items, AccountType.LIABILITY, AccountGroup.CURRENT_LIABILITIES.value
    )
    quick_assets = sum(
        (
            i.amount for i in items
            if i.account_type == AccountType.ASSET
            and i.account_group == AccountGroup.CURRENT_ASSETS.value
            and i.account_code in QUICK_ASSET_CODES
        ),
        Decimal("0"),
    )

    return BalanceSheetSummary(
        total_assets=assets,
        total_liabilities=liabilities,
        total_equity=equity,
        total_revenue=revenue,
        total_expense=expense,
        net_income=net_income,
        current_ratio=ratio(current_assets, current_liabilities),
        quick_ratio=ratio(quick_assets, current_liabilities),
        debt_to_equity_ratio=ratio(liabilities, equity),
        return_on_assets=ratio(net_income, assets),
        return_on_equity=ratio(net_income, equity),
        is_balanced=is_balanced(assets, liabilities, equity),
    )

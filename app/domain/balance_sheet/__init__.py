"""Balance sheet domain module."""

from .enums import (
    AccountType,
    AccountGroup,
    PeriodType,
    BalanceSheetStatus,
)

__all__ = [
    "AccountType",
    "AccountGroup",
    "PeriodType",
    "BalanceSheetStatus",
]

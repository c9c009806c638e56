"""Balance sheet domain enums."""

from enum import Enum as PyEnum


class AccountType(str, PyEnum):
    """Chart of Accounts account types."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class AccountGroup(str, PyEnum):
    """Account groups used by the ratio calculations."""
    CURRENT_ASSETS = "current-assets"
    NON_CURRENT_ASSETS = "non-current-assets"
    FIXED_ASSETS = "fixed-assets"
    INTANGIBLE_ASSETS = "intangible-assets"
    CURRENT_LIABILITIES = "current-liabilities"
    NON_CURRENT_LIABILITIES = "non-current-liabilities"
    CAPITAL = "capital"
    RESERVES = "reserves"
    RETAINED_EARNINGS = "retained-earnings"
    OPERATIONAL_REVENUE = "operational-revenue"
    NON_OPERATIONAL_REVENUE = "non-operational-revenue"
    OPERATIONAL_EXPENSE = "operational-expense"
    NON_OPERATIONAL_EXPENSE = "non-operational-expense"
    TAX_EXPENSE = "tax-expense"


class PeriodType(str, PyEnum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class BalanceSheetStatus(str, PyEnum):
    """Balance sheet lifecycle status."""
    DRAFT = "draft"
    PUBLISHED = "published"
    AUDITED = "audited"

"""Balance sheet lifecycle, items and summaries."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, List, Optional

import structlog

from app.core.errors import BusinessRuleError, NotFoundError
from app.db.store import InMemoryStore
from app.models.base import utcnow
from app.models.balance_sheet import AccountingAccount, BalanceSheet, BalanceSheetItem
from app.domain.balance_sheet.enums import AccountType, BalanceSheetStatus, PeriodType
from app.domain.balance_sheet.summary import BalanceSheetSummary, summarize

logger = structlog.get_logger()

NOT_FOUND_MESSAGE = "Balanço não encontrado"
DRAFT_ONLY_EDIT = "Apenas balanços em rascunho podem ser editados"

HEADER_FIELDS = {"fiscal_year_id", "period", "period_type", "notes"}


def _money(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))


class BalanceSheetService:
    """
    Draft → published → audited lifecycle.

    Items can only change while the sheet is a draft. Item mutations and the
    header's ``updated_at`` refresh are two separate writes.
    """

    def __init__(
        self,
        store: InMemoryStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.sheets = store.balance_sheets
        self.items = store.balance_sheet_items
        self.accounts = store.accounts
        self.clock = clock

    # ------------------------------------------------------------------
    # Balance sheets
    # ------------------------------------------------------------------

    def create_balance_sheet(
        self,
        company_id: Optional[str],
        fiscal_year_id: str,
        period: str,
        period_type: PeriodType,
        created_by: str = "",
        notes: Optional[str] = None,
    ) -> BalanceSheet:
        if not company_id:
            raise BusinessRuleError("Nenhuma empresa ativa selecionada")
        now = self.clock()
        sheet = BalanceSheet(
            fiscal_year_id=fiscal_year_id,
            company_id=company_id,
            period=period,
            period_type=PeriodType(period_type),
            status=BalanceSheetStatus.DRAFT,
            created_by=created_by,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        self.sheets.add(sheet)
        logger.info("Balance sheet created", balance_sheet_id=sheet.id, period=period)
        return sheet

    def update_balance_sheet(self, sheet_id: str, **updates: Any) -> BalanceSheet:
        sheet = self._require(sheet_id)
        for key, value in updates.items():
            if key not in HEADER_FIELDS:
                continue
            # notes is the only header field a null clears
            if value is None and key != "notes":
                continue
            if key == "period_type":
                value = PeriodType(value)
            setattr(sheet, key, value)
        sheet.updated_at = self.clock()
        logger.info("Balance sheet updated", balance_sheet_id=sheet_id, fields=sorted(updates))
        return sheet

    def delete_balance_sheet(self, sheet_id: str) -> None:
        sheet = self._require(sheet_id)
        if sheet.status != BalanceSheetStatus.DRAFT:
            logger.warning(
                "Balance sheet delete refused",
                balance_sheet_id=sheet_id,
                status=sheet.status.value,
            )
            raise BusinessRuleError("Apenas balanços em rascunho podem ser excluídos")
        self.sheets.remove(sheet_id)
        removed = self.items.remove_where(lambda i: i.balance_sheet_id == sheet_id)
        logger.info("Balance sheet deleted", balance_sheet_id=sheet_id, items_removed=removed)

    def publish_balance_sheet(self, sheet_id: str) -> BalanceSheet:
        sheet = self._require(sheet_id)
        if sheet.status != BalanceSheetStatus.DRAFT:
            raise BusinessRuleError("Apenas balanços em rascunho podem ser publicados")
        now = self.clock()
        sheet.status = BalanceSheetStatus.PUBLISHED
        sheet.published_at = now
        sheet.updated_at = now
        logger.info("Balance sheet published", balance_sheet_id=sheet_id)
        return sheet

    def audit_balance_sheet(self, sheet_id: str, auditor_name: str) -> BalanceSheet:
        sheet = self._require(sheet_id)
        if sheet.status != BalanceSheetStatus.PUBLISHED:
            raise BusinessRuleError("Apenas balanços publicados podem ser auditados")
        now = self.clock()
        sheet.status = BalanceSheetStatus.AUDITED
        sheet.audited_at = now
        sheet.audited_by = auditor_name
        sheet.updated_at = now
        logger.info("Balance sheet audited", balance_sheet_id=sheet_id, auditor=auditor_name)
        return sheet

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item(
        self,
        sheet_id: str,
        account_id: str,
        amount: Any,
        budgeted_amount: Any = None,
        notes: Optional[str] = None,
    ) -> BalanceSheetItem:
        self._require_draft(sheet_id)
        account = self.accounts.get(account_id)
        if account is None:
            raise NotFoundError("Conta contábil não encontrada")
        if self.items.list(
            lambda i: i.balance_sheet_id == sheet_id and i.account_id == account_id
        ):
            raise BusinessRuleError("Esta conta já existe neste balanço")

        amount = Decimal(str(amount))
        budgeted = _money(budgeted_amount)
        item = BalanceSheetItem(
            balance_sheet_id=sheet_id,
            account_id=account.id,
            account_code=account.code,
            account_name=account.name,
            account_type=account.type,
            account_group=account.group,
            amount=amount,
            budgeted_amount=budgeted,
            variance=None if budgeted is None else amount - budgeted,
            notes=notes,
        )
        self.items.add(item)
        self._touch(sheet_id)
        logger.info(
            "Balance sheet item added",
            balance_sheet_id=sheet_id,
            item_id=item.id,
            account_code=account.code,
        )
        return item

    def update_item(self, sheet_id: str, item_id: str, **updates: Any) -> BalanceSheetItem:
        self._require_draft(sheet_id)
        item = self.items.get(item_id)
        if item is None or item.balance_sheet_id != sheet_id:
            raise NotFoundError("Item não encontrado")

        if updates.get("amount") is not None:
            item.amount = Decimal(str(updates["amount"]))
        if updates.get("budgeted_amount") is not None:
            item.budgeted_amount = Decimal(str(updates["budgeted_amount"]))
        if "notes" in updates:
            item.notes = updates["notes"]
        if item.budgeted_amount is not None:
            item.variance = item.amount - item.budgeted_amount

        self._touch(sheet_id)
        logger.info("Balance sheet item updated", balance_sheet_id=sheet_id, item_id=item_id)
        return item

    def delete_item(self, sheet_id: str, item_id: str) -> None:
        self._require_draft(sheet_id)
        self.items.remove_where(
            lambda i: i.id == item_id and i.balance_sheet_id == sheet_id
        )
        self._touch(sheet_id)
        logger.info("Balance sheet item deleted", balance_sheet_id=sheet_id, item_id=item_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_balance_sheet(self, sheet_id: str) -> Optional[BalanceSheet]:
        return self.sheets.get(sheet_id)

    def list_balance_sheets(self, company_id: Optional[str] = None) -> List[BalanceSheet]:
        return self.sheets.list(lambda s: company_id is None or s.company_id == company_id)

    def get_items(self, sheet_id: str) -> List[BalanceSheetItem]:
        return self.items.list(lambda i: i.balance_sheet_id == sheet_id)

    def get_summary(self, sheet_id: str) -> BalanceSheetSummary:
        self._require(sheet_id)
        return summarize(self.get_items(sheet_id))

    def get_by_fiscal_year(self, fiscal_year_id: str) -> List[BalanceSheet]:
        sheets = self.sheets.list(lambda s: s.fiscal_year_id == fiscal_year_id)
        return sorted(sheets, key=lambda s: s.period)

    def get_by_period_type(self, period_type: PeriodType) -> List[BalanceSheet]:
        sheets = self.sheets.list(lambda s: s.period_type == PeriodType(period_type))
        return sorted(sheets, key=lambda s: s.period)

    def filter_balance_sheets(
        self,
        fiscal_year_id: str = "all",
        period_type: str = "all",
        status: str = "all",
        search: str = "",
        company_id: Optional[str] = None,
    ) -> List[BalanceSheet]:
        sheets = self.list_balance_sheets(company_id)
        if fiscal_year_id != "all":
            sheets = [s for s in sheets if s.fiscal_year_id == fiscal_year_id]
        if period_type != "all":
            sheets = [s for s in sheets if s.period_type.value == period_type]
        if status != "all":
            sheets = [s for s in sheets if s.status.value == status]
        if search:
            term = search.lower()
            sheets = [
                s for s in sheets
                if term in s.period.lower() or (s.notes and term in s.notes.lower())
            ]
        return sorted(sheets, key=lambda s: s.period, reverse=True)

    def list_accounts(self, company_id: Optional[str] = None) -> List[AccountingAccount]:
        return self.accounts.list(lambda a: company_id is None or a.company_id == company_id)

    def get_accounts_by_type(self, type: AccountType) -> List[AccountingAccount]:
        return self.accounts.list(lambda a: a.type == AccountType(type))

    def get_accounts_by_group(self, group: str) -> List[AccountingAccount]:
        return self.accounts.list(lambda a: a.group == group)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, sheet_id: str) -> BalanceSheet:
        sheet = self.sheets.get(sheet_id)
        if sheet is None:
            logger.warning("Balance sheet not found", balance_sheet_id=sheet_id)
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return sheet

    def _require_draft(self, sheet_id: str) -> BalanceSheet:
        sheet = self._require(sheet_id)
        if sheet.status != BalanceSheetStatus.DRAFT:
            logger.warning(
                "Edit of non-draft balance sheet refused",
                balance_sheet_id=sheet_id,
                status=sheet.status.value,
            )
            raise BusinessRuleError(DRAFT_ONLY_EDIT)
        return sheet

    def _touch(self, sheet_id: str) -> None:
        sheet = self.sheets.get(sheet_id)
        if sheet is not None:
            sheet.updated_at = self.clock()

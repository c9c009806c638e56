"""Cost center model."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from app.models.base import TimestampMixin, new_id
from app.domain.cost_centers.enums import CostCenterStatus


@dataclass
class CostCenter(TimestampMixin):
    """A budget-owning organizational unit.

    Children are never stored on the record; the hierarchy is derived from
    ``parent_id`` on read.
    """

    code: str = ""
    name: str = ""
    description: str = ""
    department: str = ""
    manager: str = ""
    company_id: Optional[str] = None
    parent_id: Optional[str] = None
    level: int = 0
    path: str = ""

    budget: Decimal = Decimal("0")
    spent: Decimal = Decimal("0")
    allocated_budget: Decimal = Decimal("0")
    inherited_budget: Decimal = Decimal("0")

    status: CostCenterStatus = CostCenterStatus.ACTIVE
    id: str = field(default_factory=new_id)

"""Cost center domain enums."""

from enum import Enum as PyEnum


class CostCenterStatus(str, PyEnum):
    """Cost center lifecycle status."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class UtilizationLevel(str, PyEnum):
    """Budget utilization band."""
    OK = "ok"
    WARNING = "warning"  # above 75%
    CRITICAL = "critical"  # above 90%

"""Cost center domain module."""

from .enums import (
    CostCenterStatus,
    UtilizationLevel,
)

__all__ = [
    "CostCenterStatus",
    "UtilizationLevel",
]

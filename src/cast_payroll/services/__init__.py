"""Services that feed the payroll engine from the database."""

from cast_payroll.services.payroll_service import (
    PayrollService,
    ProfileNotFoundError,
    StoreNotFoundError,
)
from cast_payroll.services.snapshot_loader import SnapshotLoader

__all__ = [
    "PayrollService",
    "ProfileNotFoundError",
    "SnapshotLoader",
    "StoreNotFoundError",
]

"""Cast payroll: per-business-day wage, back and deduction computation."""

__version__ = "1.0.0"

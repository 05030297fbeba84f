"""Payroll calculation engine."""

from cast_payroll.calculators.back_calculator import BackCalculator
from cast_payroll.calculators.business_date import BusinessDateResolver
from cast_payroll.calculators.engine import PayrollEngine
from cast_payroll.calculators.fee_classifier import FeeClassifier
from cast_payroll.calculators.time_rounder import TimeRounder

__all__ = [
    "PayrollEngine",
    "BackCalculator",
    "BusinessDateResolver",
    "FeeClassifier",
    "TimeRounder",
]

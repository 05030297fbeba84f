"""Fee category classification from menu categories and item labels."""

from __future__ import annotations

from typing import Callable

from cast_payroll.calculators.types import FeeCategory, Menu

IN_HOUSE_TERM = "場内"
NOMINATION_TERM = "指名"
COMPANION_TERM = "同伴"


def _contains(term: str) -> Callable[[str], bool]:
    return lambda label: term in label


class FeeClassifier:
    """Classifies labels into fee categories.

    Rules are evaluated in priority order and the first match wins, so an
    "場内指名" label is an in-house nomination, never a plain nomination.
    """

    RULES: tuple[tuple[Callable[[str], bool], FeeCategory], ...] = (
        (_contains(IN_HOUSE_TERM), FeeCategory.IN_HOUSE_NOMINATION),
        (_contains(NOMINATION_TERM), FeeCategory.NOMINATION),
        (_contains(COMPANION_TERM), FeeCategory.COMPANION),
    )

    @classmethod
    def classify(cls, label: str | None) -> FeeCategory:
        """Classify a category name or free-text item label."""
        if not label:
            return FeeCategory.STORE
        normalized = label.lower()
        for matches, category in cls.RULES:
            if matches(normalized):
                return category
        return FeeCategory.STORE

    @classmethod
    def classify_order(cls, menu: Menu | None, item_name: str | None) -> FeeCategory:
        """Classify an order line.

        The menu's category decides when the line has a menu; the free-text
        label is only consulted for manual lines.
        """
        if menu is not None:
            return cls.classify(menu.category_name)
        return cls.classify(item_name)

"""Amount calculators used by transaction templates.

Each calculator is a pure function of a document returning a Decimal. They are
evaluated when a transaction is generated, so they always see the document's
current totals.
"""

from collections.abc import Callable
from decimal import Decimal

from document_ledger.domain.documents import Document
from document_ledger.domain.value_objects import round_amount, to_decimal

AmountCalculator = Callable[[Document], Decimal]

_ZERO = Decimal("0")


def line_total(document: Document) -> Decimal:
    """Sum of line amounts (quantity times unit price)."""
    return sum((line.amount for line in document.lines), _ZERO)


def subtotal(document: Document) -> Decimal:
    """Sum of document totals that are not taxes."""
    return sum((t.total for t in document.totals if not t.is_tax), _ZERO)


def tax_total(document: Document) -> Decimal:
    """Sum of document totals whose concept carries the tax prefix."""
    return sum((t.total for t in document.totals if t.is_tax), _ZERO)


def grand_total(document: Document) -> Decimal:
    """Sum of every document total, taxes included."""
    return sum((t.total for t in document.totals), _ZERO)


def for_concept(concept: str) -> AmountCalculator:
    """Sum of document totals whose concept matches exactly."""

    def calculate(document: Document) -> Decimal:
        return sum((t.total for t in document.totals if t.concept == concept), _ZERO)

    return calculate


def for_concept_starting_with(prefix: str) -> AmountCalculator:
    """Sum of document totals whose concept starts with prefix, ignoring case."""
    lowered = prefix.lower()

    def calculate(document: Document) -> Decimal:
        return sum(
            (t.total for t in document.totals if t.concept.lower().startswith(lowered)),
            _ZERO,
        )

    return calculate


def fixed_amount(value: Decimal | int | str) -> AmountCalculator:
    amount = to_decimal(value)

    def calculate(document: Document) -> Decimal:
        return amount

    return calculate


def percentage(
    base: AmountCalculator, pct: Decimal | int | str
) -> AmountCalculator:
    """Percentage of another calculator's result."""
    factor = to_decimal(pct) / Decimal("100")

    def calculate(document: Document) -> Decimal:
        return base(document) * factor

    return calculate


def estimated_cost_of_goods_sold(
    cost_percentage: Decimal | int | str = Decimal("60"),
) -> AmountCalculator:
    """Cost of goods sold estimated as a share of the subtotal, to the cent.

    A stand-in for real inventory costing, which lives outside this engine.
    """
    factor = to_decimal(cost_percentage) / Decimal("100")

    def calculate(document: Document) -> Decimal:
        return round_amount(subtotal(document) * factor, 2)

    return calculate


__all__ = [
    "AmountCalculator",
    "estimated_cost_of_goods_sold",
    "fixed_amount",
    "for_concept",
    "for_concept_starting_with",
    "grand_total",
    "line_total",
    "percentage",
    "subtotal",
    "tax_total",
]

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from document_ledger.domain.taxes import Tax
from document_ledger.domain.value_objects import (
    SUBTOTAL_CONCEPT,
    DocumentOperation,
    is_tax_concept,
    to_decimal,
)


@dataclass
class BusinessEntity:
    code: str
    name: str
    id: UUID = field(default_factory=uuid4)

    @property
    def identifiers(self) -> set[str]:
        return {self.code, str(self.id)}


@dataclass
class Item:
    code: str
    description: str = ""
    base_price: Decimal = Decimal("0")
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        self.base_price = to_decimal(self.base_price)

    @property
    def identifiers(self) -> set[str]:
        return {self.code, str(self.id)}


@dataclass
class DocumentType:
    code: str
    name: str = ""
    operation: DocumentOperation | None = None
    is_enabled: bool = True
    id: UUID = field(default_factory=uuid4)


@dataclass
class Total:
    concept: str
    total: Decimal = Decimal("0")
    debit_account_code: str | None = None
    credit_account_code: str | None = None
    include_in_transaction: bool = False
    id: UUID = field(default_factory=uuid4)
    # Set on document totals that were summed up from line totals.
    is_line_aggregate: bool = False

    def __post_init__(self) -> None:
        self.total = to_decimal(self.total)

    @property
    def is_tax(self) -> bool:
        return is_tax_concept(self.concept)

    @property
    def has_account_codes(self) -> bool:
        return bool(self.debit_account_code or self.credit_account_code)

    @property
    def is_derived(self) -> bool:
        return (
            self.is_tax
            or self.is_line_aggregate
            or self.concept.lower() == SUBTOTAL_CONCEPT.lower()
        )


@dataclass
class Line:
    item: Item | None = None
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")
    totals: list[Total] = field(default_factory=list)
    # Pre-resolved taxes; when empty the tax rule evaluator decides.
    taxes: list[Tax] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        self.quantity = to_decimal(self.quantity)
        self.unit_price = to_decimal(self.unit_price)

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def tax_totals(self) -> list[Total]:
        return [t for t in self.totals if t.is_tax]

    def remove_tax_totals(self) -> int:
        before = len(self.totals)
        self.totals[:] = [t for t in self.totals if not t.is_tax]
        return before - len(self.totals)


@dataclass
class Document:
    document_type: DocumentType | None
    business_entity: BusinessEntity | None = None
    document_date: date = field(default_factory=date.today)
    lines: list[Line] = field(default_factory=list)
    totals: list[Total] = field(default_factory=list)
    document_number: str = ""
    id: UUID = field(default_factory=uuid4)

    @property
    def operation(self) -> DocumentOperation | None:
        if self.document_type is None:
            return None
        return self.document_type.operation

    @property
    def subtotal(self) -> Decimal:
        """Pre-tax base: the sum of line amounts."""
        return sum((line.amount for line in self.lines), Decimal("0"))

    @property
    def total_quantity(self) -> Decimal:
        return sum((line.quantity for line in self.lines), Decimal("0"))

    @property
    def tax_totals(self) -> list[Total]:
        return [t for t in self.totals if t.is_tax]

    def add_line(self, line: Line) -> Line:
        self.lines.append(line)
        return line

    def add_total(self, total: Total) -> Total:
        self.totals.append(total)
        return total

    def remove_derived_totals(self) -> int:
        """Drop tax totals, line aggregates and any Subtotal; keep manual ones.

        The Subtotal is always rebuilt from the lines, so one entered by hand
        is replaced rather than counted twice.
        """
        before = len(self.totals)
        self.totals[:] = [t for t in self.totals if not t.is_derived]
        return before - len(self.totals)

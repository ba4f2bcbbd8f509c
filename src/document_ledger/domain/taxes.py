from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID, uuid4

from document_ledger.domain.value_objects import (
    DocumentOperation,
    GroupType,
    TaxApplicationLevel,
    TaxType,
    to_decimal,
)
from document_ledger.exceptions import UnsupportedTaxTypeError


@dataclass(frozen=True)
class Tax:
    code: str
    name: str
    tax_type: TaxType | str = TaxType.PERCENTAGE
    percentage: Decimal = Decimal("0")
    amount: Decimal = Decimal("0")
    application_level: TaxApplicationLevel = TaxApplicationLevel.LINE
    is_enabled: bool = True
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        object.__setattr__(self, "percentage", to_decimal(self.percentage))
        object.__setattr__(self, "amount", to_decimal(self.amount))
        # Unknown type values are kept as given so callers can decide how to
        # degrade; see is_supported.
        if not isinstance(self.tax_type, TaxType):
            try:
                object.__setattr__(self, "tax_type", TaxType(self.tax_type))
            except ValueError:
                pass

    @property
    def is_supported(self) -> bool:
        return isinstance(self.tax_type, TaxType)

    @property
    def is_line_level(self) -> bool:
        return self.application_level == TaxApplicationLevel.LINE

    @property
    def is_document_level(self) -> bool:
        return self.application_level == TaxApplicationLevel.DOCUMENT

    def calculate(self, base_amount: Decimal, quantity: Decimal) -> Decimal:
        """Compute the unrounded tax for a taxable base and a unit count.

        Raises:
            UnsupportedTaxTypeError: If the tax type is not one the engine knows
        """
        if self.tax_type == TaxType.PERCENTAGE:
            return base_amount * (self.percentage / Decimal("100"))
        if self.tax_type == TaxType.FIXED_AMOUNT:
            return self.amount
        if self.tax_type == TaxType.AMOUNT_PER_UNIT:
            return self.amount * quantity
        raise UnsupportedTaxTypeError(self.code, self.tax_type)


@dataclass(frozen=True)
class TaxRule:
    """Scoped, prioritized directive enabling or suppressing one tax.

    Lower priority values take precedence. A disabled rule that wins for its
    tax suppresses it even when a more general enabled rule also matches.
    """

    tax_code: str
    document_type_code: str | None = None
    document_operation: DocumentOperation | None = None
    business_entity_group_id: str | None = None
    item_group_id: str | None = None
    is_enabled: bool = True
    priority: int = 1
    id: UUID = field(default_factory=uuid4)

    @property
    def has_filter(self) -> bool:
        return bool(
            self.document_type_code
            or self.document_operation is not None
            or self.business_entity_group_id
            or self.item_group_id
        )

    def matches_scope(
        self, document_type_code: str | None, operation: DocumentOperation | None
    ) -> bool:
        """Every scope field the rule populates must match the document."""
        if self.document_type_code and self.document_type_code != document_type_code:
            return False
        if (
            self.document_operation is not None
            and self.document_operation != operation
        ):
            return False
        return True

    def applies_to_tax(self, tax: Tax) -> bool:
        return self.tax_code == tax.code or self.tax_code == str(tax.id)


@dataclass(frozen=True)
class GroupMembership:
    group_id: str
    entity_id: str
    group_type: GroupType
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class TaxAccountingInfo:
    debit_account_code: str | None = None
    credit_account_code: str | None = None
    include_in_transaction: bool = True
    account_description: str = ""

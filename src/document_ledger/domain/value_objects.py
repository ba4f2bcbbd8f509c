from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

TAX_CONCEPT_PREFIX = "Tax:"
SUBTOTAL_CONCEPT = "Subtotal"


class DocumentOperation(str, Enum):
    PURCHASE_REQUISITION = "purchase_requisition"
    REQUEST_FOR_QUOTATION = "request_for_quotation"
    PURCHASE_ORDER = "purchase_order"
    GOODS_RECEIPT_NOTE = "goods_receipt_note"
    PURCHASE_INVOICE = "purchase_invoice"
    DEBIT_NOTE = "debit_note"
    QUOTATION = "quotation"
    SALES_ORDER = "sales_order"
    DELIVERY_NOTE = "delivery_note"
    SALES_INVOICE = "sales_invoice"
    CREDIT_NOTE = "credit_note"
    RECEIPT = "receipt"
    PAYMENT = "payment"
    EXPENSE = "expense"


class EntryType(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class TaxType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    AMOUNT_PER_UNIT = "amount_per_unit"


class TaxApplicationLevel(str, Enum):
    LINE = "line"
    DOCUMENT = "document"


class GroupType(str, Enum):
    BUSINESS_ENTITY = "business_entity"
    ITEM = "item"


def is_tax_concept(concept: str) -> bool:
    """Tax totals are recognised by their concept prefix, ignoring case."""
    return concept[: len(TAX_CONCEPT_PREFIX)].lower() == TAX_CONCEPT_PREFIX.lower()


def tax_concept(name: str, code: str) -> str:
    return f"{TAX_CONCEPT_PREFIX} {name} ({code})"


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_amount(amount: Decimal, places: int = 2) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return amount.quantize(quantum, rounding=ROUND_HALF_UP)


__all__ = [
    "SUBTOTAL_CONCEPT",
    "TAX_CONCEPT_PREFIX",
    "DocumentOperation",
    "EntryType",
    "GroupType",
    "TaxApplicationLevel",
    "TaxType",
    "is_tax_concept",
    "round_amount",
    "tax_concept",
    "to_decimal",
]

from datetime import date
from decimal import Decimal

import pytest

from document_ledger.config import Environment, Settings
from document_ledger.domain.documents import (
    BusinessEntity,
    Document,
    DocumentType,
    Item,
    Line,
)
from document_ledger.domain.taxes import GroupMembership, Tax, TaxRule
from document_ledger.domain.value_objects import (
    DocumentOperation,
    GroupType,
    TaxApplicationLevel,
    TaxType,
)
from document_ledger.services.tax_rules import TaxRuleEvaluator

TAXABLE_COMPANIES = "TAXABLE_COMPANIES"
EXEMPT_ITEMS = "EXEMPT_ITEMS"


@pytest.fixture
def settings() -> Settings:
    return Settings(environment=Environment.TESTING)


@pytest.fixture
def invoice_type() -> DocumentType:
    return DocumentType(
        code="INV",
        name="Sales Invoice",
        operation=DocumentOperation.SALES_INVOICE,
    )


@pytest.fixture
def registered_company() -> BusinessEntity:
    return BusinessEntity(code="COMPANY001", name="Empresa Registrada S.A.")


@pytest.fixture
def consumer() -> BusinessEntity:
    return BusinessEntity(code="CONSUMER001", name="Consumidor Final")


@pytest.fixture
def standard_product() -> Item:
    return Item(code="PROD001", description="Standard Product", base_price=Decimal("100"))


@pytest.fixture
def exempt_product() -> Item:
    return Item(code="PROD002", description="Exempt Product", base_price=Decimal("50"))


@pytest.fixture
def iva() -> Tax:
    return Tax(
        code="IVA",
        name="IVA",
        tax_type=TaxType.PERCENTAGE,
        percentage=Decimal("13"),
        application_level=TaxApplicationLevel.LINE,
    )


@pytest.fixture
def group_memberships(
    registered_company: BusinessEntity, exempt_product: Item
) -> list[GroupMembership]:
    return [
        GroupMembership(
            group_id=TAXABLE_COMPANIES,
            entity_id=registered_company.code,
            group_type=GroupType.BUSINESS_ENTITY,
        ),
        GroupMembership(
            group_id=EXEMPT_ITEMS,
            entity_id=exempt_product.code,
            group_type=GroupType.ITEM,
        ),
    ]


@pytest.fixture
def iva_rules() -> list[TaxRule]:
    return [
        TaxRule(
            tax_code="IVA",
            document_operation=DocumentOperation.SALES_INVOICE,
            business_entity_group_id=TAXABLE_COMPANIES,
            is_enabled=True,
            priority=1,
        ),
        TaxRule(
            tax_code="IVA",
            document_operation=DocumentOperation.SALES_INVOICE,
            business_entity_group_id=TAXABLE_COMPANIES,
            item_group_id=EXEMPT_ITEMS,
            is_enabled=False,
            priority=0,
        ),
    ]


@pytest.fixture
def evaluator(
    iva_rules: list[TaxRule], iva: Tax, group_memberships: list[GroupMembership]
) -> TaxRuleEvaluator:
    return TaxRuleEvaluator(iva_rules, [iva], group_memberships)


@pytest.fixture
def invoice(
    invoice_type: DocumentType,
    registered_company: BusinessEntity,
    standard_product: Item,
) -> Document:
    """Two taxable lines: 3 x 100 = 300 and 1 x 151 = 151."""
    document = Document(
        document_type=invoice_type,
        business_entity=registered_company,
        document_date=date(2024, 6, 15),
        document_number="INV-0001",
    )
    document.add_line(Line(item=standard_product, quantity=3, unit_price=Decimal("100")))
    document.add_line(Line(item=standard_product, quantity=1, unit_price=Decimal("151")))
    return document


@pytest.fixture
def sales_account_mapping() -> dict[str, str]:
    return {
        "AccountsReceivable": "1101",
        "SalesRevenue": "4101",
        "SalesTaxPayable": "2105",
        "CostOfGoodsSold": "5101",
        "Inventory": "1301",
    }

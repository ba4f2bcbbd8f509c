"""Dependency container for Document Ledger.

Wires the engine's services from one set of read-only inputs: settings, the
account mapping and the tax, rule and group membership snapshots.

Usage:
    from document_ledger.container import Container

    container = Container(
        account_mapping={"AccountsReceivable": "1101", "SalesRevenue": "4101"},
        taxes=taxes,
        tax_rules=rules,
        group_memberships=memberships,
    )
    container.tax_calculator_for(document).recompute()
    transaction, entries = await container.template_generator.generate_transaction(document)
"""

from collections.abc import Iterable, Mapping
from functools import cached_property
from typing import TYPE_CHECKING

from document_ledger.config import Settings, get_settings
from document_ledger.domain.taxes import GroupMembership, Tax, TaxRule
from document_ledger.logging_config import configure_logging, get_logger
from document_ledger.services.account_mapping import AccountMapping

if TYPE_CHECKING:
    from document_ledger.domain.documents import Document
    from document_ledger.repositories.interfaces import TransactionRepository
    from document_ledger.services.tax_accounting import TaxAccountingProfileService
    from document_ledger.services.tax_calculator import DocumentTaxCalculator
    from document_ledger.services.tax_rules import TaxRuleEvaluator
    from document_ledger.services.transaction_generator import (
        TemplateTransactionGenerator,
        TotalsTransactionGenerator,
    )

logger = get_logger(__name__)


class Container:
    """Lazily built services sharing one configuration.

    Services are instantiated on first access and cached for reuse. Pass a
    repository to store totals-driven transactions somewhere other than memory,
    and configure_logs=True to apply the settings' log level, format and file.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        account_mapping: Mapping[str, str] | None = None,
        taxes: Iterable[Tax] = (),
        tax_rules: Iterable[TaxRule] = (),
        group_memberships: Iterable[GroupMembership] = (),
        repository: "TransactionRepository | None" = None,
        register_stock_templates: bool = True,
        configure_logs: bool = False,
    ) -> None:
        self._settings = settings or get_settings()
        if configure_logs:
            configure_logging(self._settings)
        self._account_mapping = AccountMapping(account_mapping)
        self._taxes = tuple(taxes)
        self._tax_rules = tuple(tax_rules)
        self._group_memberships = tuple(group_memberships)
        self._repository = repository
        self._register_stock_templates = register_stock_templates
        logger.debug(
            "container_created",
            environment=self._settings.environment.value,
            taxes=len(self._taxes),
            tax_rules=len(self._tax_rules),
            account_keys=len(self._account_mapping),
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def account_mapping(self) -> AccountMapping:
        return self._account_mapping

    @cached_property
    def transaction_repository(self) -> "TransactionRepository":
        """Get the store used by the totals-driven generator."""
        if self._repository is not None:
            return self._repository
        from document_ledger.repositories.memory import InMemoryTransactionRepository

        return InMemoryTransactionRepository()

    @cached_property
    def tax_rule_evaluator(self) -> "TaxRuleEvaluator":
        """Get the evaluator; validates definitions when strict_tax_types is on."""
        from document_ledger.services.tax_rules import TaxRuleEvaluator

        return TaxRuleEvaluator(
            self._tax_rules,
            self._taxes,
            self._group_memberships,
            strict=self._settings.strict_tax_types,
        )

    @cached_property
    def tax_accounting_profiles(self) -> "TaxAccountingProfileService":
        from document_ledger.services.tax_accounting import TaxAccountingProfileService

        return TaxAccountingProfileService()

    @cached_property
    def template_generator(self) -> "TemplateTransactionGenerator":
        """Get the template-driven generator, with stock templates registered."""
        from document_ledger.services.templates import TransactionTemplateFactory
        from document_ledger.services.transaction_generator import (
            TemplateTransactionGenerator,
        )

        generator = TemplateTransactionGenerator(
            self._account_mapping, settings=self._settings
        )
        if self._register_stock_templates:
            for template in (
                TransactionTemplateFactory.sales_invoice(),
                TransactionTemplateFactory.purchase_invoice(),
                TransactionTemplateFactory.payment(),
                TransactionTemplateFactory.receipt(),
            ):
                generator.register_template(template)
        return generator

    @cached_property
    def totals_generator(self) -> "TotalsTransactionGenerator":
        from document_ledger.services.transaction_generator import (
            TotalsTransactionGenerator,
        )

        return TotalsTransactionGenerator(
            self.transaction_repository, self._account_mapping, settings=self._settings
        )

    def tax_calculator_for(
        self, document: "Document", document_type_code: str | None = None
    ) -> "DocumentTaxCalculator":
        """Get a tax calculator bound to one document."""
        from document_ledger.services.tax_calculator import DocumentTaxCalculator

        return DocumentTaxCalculator(
            document,
            self.tax_rule_evaluator,
            document_type_code=document_type_code,
            accounting_profiles=self.tax_accounting_profiles,
            settings=self._settings,
        )

"""Generation of balanced ledger transactions from documents.

Two generators share the balance check:

- TemplateTransactionGenerator evaluates the template registered for the
  document's type and returns the result for the caller to persist.
- TotalsTransactionGenerator posts the document totals that carry account
  codes and persists the result through a TransactionRepository.

Neither ever returns entries that fail the balance check.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal

from document_ledger.config import Settings, UnresolvedAccountPolicy, get_settings
from document_ledger.domain.documents import Document, Total
from document_ledger.domain.transactions import (
    LedgerEntry,
    Transaction,
    total_credits,
    total_debits,
)
from document_ledger.domain.value_objects import EntryType, round_amount
from document_ledger.exceptions import (
    AccountMappingNotFoundError,
    InvalidArgumentError,
    TemplateNotFoundError,
    UnbalancedTransactionError,
)
from document_ledger.logging_config import LogContext, get_logger
from document_ledger.repositories.interfaces import TransactionRepository
from document_ledger.services.account_mapping import AccountMapping
from document_ledger.services.interfaces import TransactionGenerator
from document_ledger.services.templates import TransactionTemplate, default_description

logger = get_logger(__name__)


def validate_balance(
    entries: Iterable[LedgerEntry], tolerance: Decimal = Decimal("0.01")
) -> None:
    """Check that debits equal credits within tolerance.

    Raises:
        UnbalancedTransactionError: With both totals and their difference
    """
    entries = list(entries)
    debits = total_debits(entries)
    credits = total_credits(entries)
    if abs(debits - credits) >= tolerance:
        raise UnbalancedTransactionError(debits, credits)


def _as_account_mapping(mapping: Mapping[str, str] | None) -> AccountMapping:
    if isinstance(mapping, AccountMapping):
        return mapping
    return AccountMapping(mapping)


def _new_transaction(document: Document, description: str) -> Transaction:
    return Transaction(
        transaction_date=document.document_date,
        description=description,
        document_id=document.id,
        document_number=document.document_number,
    )


class TemplateTransactionGenerator(TransactionGenerator):
    """Builds transactions from the template registered for a document type.

    Entries whose calculated amount is zero or negative are left out. An
    account key missing from the mapping aborts generation under the RAISE
    policy (the default); under SKIP the entry is dropped and the balance
    check decides.
    """

    def __init__(
        self,
        account_mapping: Mapping[str, str],
        templates: Iterable[TransactionTemplate] = (),
        *,
        unresolved_account_policy: UnresolvedAccountPolicy | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._account_mapping = _as_account_mapping(account_mapping)
        self._templates: dict[str, TransactionTemplate] = {}
        self._tolerance = settings.balance_tolerance
        self._rounding_places = settings.tax_rounding_places
        self.unresolved_account_policy = (
            unresolved_account_policy or settings.template_unresolved_account_policy
        )
        for template in templates:
            self.register_template(template)

    @property
    def account_mapping(self) -> AccountMapping:
        return self._account_mapping

    @property
    def templates(self) -> list[TransactionTemplate]:
        return list(self._templates.values())

    def register_template(self, template: TransactionTemplate) -> None:
        if template is None:
            raise InvalidArgumentError("template")
        if template.document_type_code in self._templates:
            logger.info(
                "template_replaced", document_type_code=template.document_type_code
            )
        self._templates[template.document_type_code] = template
        logger.debug(
            "template_registered",
            document_type_code=template.document_type_code,
            entries=len(template.entries),
        )

    def has_template(self, document_type_code: str) -> bool:
        return document_type_code in self._templates

    def get_template(self, document_type_code: str) -> TransactionTemplate:
        template = self._templates.get(document_type_code)
        if template is None:
            raise TemplateNotFoundError(document_type_code)
        return template

    async def generate_transaction(
        self, document: Document
    ) -> tuple[Transaction, list[LedgerEntry]]:
        """Generate a balanced transaction for a document.

        Args:
            document: Document whose type has a registered template

        Returns:
            The transaction and its ledger entries, not yet persisted

        Raises:
            InvalidArgumentError: If document or its document type is None
            TemplateNotFoundError: If no template matches the document type
            AccountMappingNotFoundError: If an account key cannot be resolved
                under the RAISE policy
            UnbalancedTransactionError: If debits and credits differ
        """
        if document is None:
            raise InvalidArgumentError("document")
        if document.document_type is None:
            raise InvalidArgumentError("document.document_type")

        template = self.get_template(document.document_type.code)

        with LogContext(document_id=str(document.id)):
            transaction = _new_transaction(document, template.describe(document))
            entries: list[LedgerEntry] = []

            for template_entry in template.entries:
                amount = round_amount(
                    template_entry.amount_calculator(document), self._rounding_places
                )
                if amount <= 0:
                    logger.debug(
                        "ledger_entry_skipped",
                        account_key=template_entry.account_key,
                        amount=str(amount),
                        reason="non_positive_amount",
                    )
                    continue

                account_id = self._account_mapping.resolve(template_entry.account_key)
                if account_id is None:
                    if self.unresolved_account_policy == UnresolvedAccountPolicy.RAISE:
                        raise AccountMappingNotFoundError(template_entry.account_key)
                    logger.warning(
                        "ledger_entry_skipped",
                        account_key=template_entry.account_key,
                        reason="unresolved_account",
                    )
                    continue

                entries.append(
                    LedgerEntry(
                        transaction_id=transaction.id,
                        account_id=account_id,
                        entry_type=template_entry.entry_type,
                        amount=amount,
                        account_name=template_entry.account_name,
                    )
                )

            validate_balance(entries, self._tolerance)
            if not entries:
                logger.warning("transaction_has_no_entries")

            logger.info(
                "transaction_generated",
                transaction_id=str(transaction.id),
                document_type_code=template.document_type_code,
                entries=len(entries),
                debits=str(total_debits(entries)),
            )
        return transaction, entries


class TotalsTransactionGenerator(TransactionGenerator):
    """Posts a document's own totals without a template.

    A document total takes part when it is flagged for inclusion or carries a
    debit or credit account code. Its debit code (if any) yields a debit entry
    and its credit code (if any) a credit entry for the same amount, so a tax
    total with both codes moves the amount between two accounts. Unresolvable
    codes are skipped under the SKIP policy (the default) and abort under
    RAISE. The balanced result is stored through the repository.
    """

    def __init__(
        self,
        repository: TransactionRepository,
        account_mapping: Mapping[str, str],
        *,
        unresolved_account_policy: UnresolvedAccountPolicy | None = None,
        settings: Settings | None = None,
    ) -> None:
        if repository is None:
            raise InvalidArgumentError("repository")
        settings = settings or get_settings()
        self._repository = repository
        self._account_mapping = _as_account_mapping(account_mapping)
        self._tolerance = settings.balance_tolerance
        self.unresolved_account_policy = (
            unresolved_account_policy or settings.totals_unresolved_account_policy
        )

    @property
    def account_mapping(self) -> AccountMapping:
        return self._account_mapping

    async def generate_transaction(
        self, document: Document
    ) -> tuple[Transaction, list[LedgerEntry]]:
        """Generate, validate and store a transaction from document totals.

        Raises:
            InvalidArgumentError: If document is None
            AccountMappingNotFoundError: Under the RAISE policy only
            UnbalancedTransactionError: If debits and credits differ; nothing
                is stored in that case
        """
        if document is None:
            raise InvalidArgumentError("document")

        with LogContext(document_id=str(document.id)):
            transaction = _new_transaction(document, default_description(document))
            entries: list[LedgerEntry] = []

            for total in document.totals:
                if not (total.include_in_transaction or total.has_account_codes):
                    continue
                if total.total <= 0:
                    logger.debug(
                        "ledger_entry_skipped",
                        concept=total.concept,
                        amount=str(total.total),
                        reason="non_positive_amount",
                    )
                    continue
                for entry_type, code in (
                    (EntryType.DEBIT, total.debit_account_code),
                    (EntryType.CREDIT, total.credit_account_code),
                ):
                    entry = self._entry_for(transaction, total, entry_type, code)
                    if entry is not None:
                        entries.append(entry)

            validate_balance(entries, self._tolerance)
            self._repository.add(transaction, entries)

            logger.info(
                "transaction_generated",
                transaction_id=str(transaction.id),
                entries=len(entries),
                debits=str(total_debits(entries)),
            )
        return transaction, entries

    def _entry_for(
        self,
        transaction: Transaction,
        total: Total,
        entry_type: EntryType,
        account_code: str | None,
    ) -> LedgerEntry | None:
        if not account_code:
            return None
        account_id = self._account_mapping.resolve(account_code)
        if account_id is None:
            if self.unresolved_account_policy == UnresolvedAccountPolicy.RAISE:
                raise AccountMappingNotFoundError(account_code)
            logger.warning(
                "ledger_entry_skipped",
                concept=total.concept,
                account_key=account_code,
                reason="unresolved_account",
            )
            return None
        return LedgerEntry(
            transaction_id=transaction.id,
            account_id=account_id,
            entry_type=entry_type,
            amount=total.total,
            account_name=total.concept,
        )

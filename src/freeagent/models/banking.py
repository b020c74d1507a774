"""
Banking records: accounts, transactions, explanations and statement uploads.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, List, Optional

from src.freeagent.models.base import (
    EcStatusValue,
    FreeAgentItem,
    FreeAgentModel,
    OptionalDate,
    OptionalDecimal,
    RebillTypeValue,
)
from src.freeagent.models.purchases import Attachment


class BankAccount(FreeAgentModel):
    root_name: ClassVar[str] = "bank_account"
    collection_name: ClassVar[str] = "bank_accounts"

    url: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    nominal_code: Optional[str] = None
    currency: Optional[str] = None
    is_personal: Optional[bool] = None
    is_primary: Optional[bool] = None
    status: Optional[str] = None
    bank_name: Optional[str] = None
    opening_balance: OptionalDecimal = None
    current_balance: OptionalDecimal = None
    latest_activity_date: OptionalDate = None
    account_number: Optional[str] = None
    sort_code: Optional[str] = None
    secondary_sort_code: Optional[str] = None
    iban: Optional[str] = None
    bic: Optional[str] = None
    email: Optional[str] = None
    bank_guess_enabled: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BankTransactionExplanation(FreeAgentModel):
    root_name: ClassVar[str] = "bank_transaction_explanation"
    collection_name: ClassVar[str] = "bank_transaction_explanations"

    url: Optional[str] = None
    bank_transaction: Optional[str] = None
    bank_account: Optional[str] = None
    dated_on: OptionalDate = None
    category: Optional[str] = None
    description: Optional[str] = None
    gross_value: OptionalDecimal = None
    foreign_currency_value: OptionalDecimal = None
    currency: Optional[str] = None
    sales_tax_rate: OptionalDecimal = None
    sales_tax_value: OptionalDecimal = None
    second_sales_tax_rate: OptionalDecimal = None
    manual_sales_tax_amount: OptionalDecimal = None
    ec_status: EcStatusValue = None
    rebill_type: RebillTypeValue = None
    rebill_factor: OptionalDecimal = None
    rebill_to_project: Optional[str] = None
    project: Optional[str] = None
    paid_invoice: Optional[str] = None
    paid_bill: Optional[str] = None
    paid_user: Optional[str] = None
    linked_invoice: Optional[str] = None
    linked_credit_note: Optional[str] = None
    linked_bill: Optional[str] = None
    transfer_bank_account: Optional[str] = None
    is_locked: Optional[bool] = None
    is_deletable: Optional[bool] = None
    marked_for_review: Optional[bool] = None
    receipt_reference: Optional[str] = None
    attachment: Optional[Attachment] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BankTransaction(FreeAgentModel):
    root_name: ClassVar[str] = "bank_transaction"
    collection_name: ClassVar[str] = "bank_transactions"

    url: Optional[str] = None
    bank_account: Optional[str] = None
    dated_on: OptionalDate = None
    description: Optional[str] = None
    full_description: Optional[str] = None
    amount: OptionalDecimal = None
    unexplained_amount: OptionalDecimal = None
    is_manual: Optional[bool] = None
    is_locked: Optional[bool] = None
    transaction_id: Optional[str] = None
    bank_transaction_explanations: Optional[List[BankTransactionExplanation]] = None
    uploaded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_explained(self) -> bool:
        return self.unexplained_amount is not None and self.unexplained_amount == Decimal("0")


class StatementLine(FreeAgentItem):
    """One transaction in a JSON statement upload."""

    root_name: ClassVar[str] = "statement"

    dated_on: date
    description: Optional[str] = None
    amount: Decimal
    fitid: Optional[str] = None
    transaction_type: Optional[str] = None


class BankStatementUpload(FreeAgentModel):
    """Outcome of a statement or transaction upload."""

    root_name: ClassVar[str] = "bank_statement_upload"

    imported_transaction_count: Optional[int] = None
    duplicate_transaction_count: Optional[int] = None
    ignored_transaction_count: Optional[int] = None
    bank_transactions: Optional[List[BankTransaction]] = None
    errors: Optional[List[str]] = None

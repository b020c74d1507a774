"""
Sales-side records: contacts, projects, invoices, estimates, credit notes, notes.
"""

from datetime import datetime
from typing import ClassVar, List, Optional

from pydantic import Field

from src.freeagent.models.base import (
    EcStatusValue,
    FreeAgentItem,
    FreeAgentModel,
    OptionalDate,
    OptionalDecimal,
    SalesTaxStatusValue,
)


class Contact(FreeAgentModel):
    root_name: ClassVar[str] = "contact"
    collection_name: ClassVar[str] = "contacts"

    url: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    organisation_name: Optional[str] = None
    active_projects_count: Optional[int] = None
    email: Optional[str] = None
    billing_email: Optional[str] = None
    phone_number: Optional[str] = None
    mobile: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    address3: Optional[str] = None
    town: Optional[str] = None
    region: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    contact_name_on_invoices: Optional[bool] = None
    default_payment_terms_in_days: Optional[int] = None
    locale: Optional[str] = None
    account_balance: OptionalDecimal = None
    uses_contact_invoice_sequence: Optional[bool] = None
    charge_sales_tax: Optional[str] = None
    sales_tax_registration_number: Optional[str] = None
    status: Optional[str] = None
    is_cis_subcontractor: Optional[bool] = None
    cis_deduction_rate: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        if self.organisation_name:
            return self.organisation_name
        return " ".join(p for p in (self.first_name, self.last_name) if p)


class Project(FreeAgentModel):
    root_name: ClassVar[str] = "project"
    collection_name: ClassVar[str] = "projects"

    url: Optional[str] = None
    contact: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    contract_po_reference: Optional[str] = None
    uses_project_invoice_sequence: Optional[bool] = None
    currency: Optional[str] = None
    budget: OptionalDecimal = None
    budget_units: Optional[str] = None
    hours_per_day: OptionalDecimal = None
    normal_billing_rate: OptionalDecimal = None
    billing_period: Optional[str] = None
    is_ir35: Optional[bool] = None
    starts_on: OptionalDate = None
    ends_on: OptionalDate = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------

class InvoiceItem(FreeAgentItem):
    root_name: ClassVar[str] = "invoice_item"
    collection_name: ClassVar[str] = "invoice_items"

    url: Optional[str] = None
    position: Optional[int] = None
    description: Optional[str] = None
    item_type: Optional[str] = None
    quantity: OptionalDecimal = None
    price: OptionalDecimal = None
    sales_tax_rate: OptionalDecimal = None
    sales_tax_value: OptionalDecimal = None
    sales_tax_status: SalesTaxStatusValue = None
    second_sales_tax_rate: OptionalDecimal = None
    category: Optional[str] = None
    project: Optional[str] = None
    subtotal: OptionalDecimal = None
    total: OptionalDecimal = None
    stock_item: Optional[str] = None
    destroy: Optional[bool] = Field(default=None, alias="_destroy")


class Invoice(FreeAgentModel):
    root_name: ClassVar[str] = "invoice"
    collection_name: ClassVar[str] = "invoices"

    url: Optional[str] = None
    contact: Optional[str] = None
    project: Optional[str] = None
    reference: Optional[str] = None
    dated_on: OptionalDate = None
    due_on: OptionalDate = None
    paid_on: OptionalDate = None
    written_off_date: OptionalDate = None
    status: Optional[str] = None
    long_status: Optional[str] = None
    currency: Optional[str] = None
    exchange_rate: OptionalDecimal = None
    net_value: OptionalDecimal = None
    sales_tax_value: OptionalDecimal = None
    total_value: OptionalDecimal = None
    paid_value: OptionalDecimal = None
    due_value: OptionalDecimal = None
    discount_percent: OptionalDecimal = None
    payment_terms_in_days: Optional[int] = None
    ec_status: EcStatusValue = None
    place_of_supply: Optional[str] = None
    comments: Optional[str] = None
    payment_methods: Optional[dict] = None
    omit_header: Optional[bool] = None
    always_show_bic_and_iban: Optional[bool] = None
    show_project_name: Optional[bool] = None
    bank_account: Optional[str] = None
    involves_sales_tax: Optional[bool] = None
    is_interim_uk_vat: Optional[bool] = None
    send_thank_you_emails: Optional[bool] = None
    send_reminder_emails: Optional[bool] = None
    send_new_invoice_emails: Optional[bool] = None
    invoice_items: Optional[List[InvoiceItem]] = None
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EmailAttachment(FreeAgentItem):
    root_name: ClassVar[str] = "attachment"
    collection_name: ClassVar[str] = "attachments"

    file_name: Optional[str] = None
    content_type: Optional[str] = None
    data: Optional[str] = None


class InvoiceEmail(FreeAgentItem):
    """Email sent for an invoice, estimate or credit note.

    `from` is a Python keyword, so the field is `from_` and travels as `from`.
    """

    root_name: ClassVar[str] = "email"

    to: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    cc: Optional[str] = None
    bcc: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    use_template: Optional[bool] = None
    email_to_sender: Optional[bool] = None
    attachments: Optional[List[EmailAttachment]] = None


# ---------------------------------------------------------------------------
# Estimates
# ---------------------------------------------------------------------------

class EstimateItem(FreeAgentItem):
    root_name: ClassVar[str] = "estimate_item"
    collection_name: ClassVar[str] = "estimate_items"

    url: Optional[str] = None
    position: Optional[int] = None
    item_type: Optional[str] = None
    quantity: OptionalDecimal = None
    price: OptionalDecimal = None
    description: Optional[str] = None
    sales_tax_rate: OptionalDecimal = None
    sales_tax_value: OptionalDecimal = None
    second_sales_tax_rate: OptionalDecimal = None
    category: Optional[str] = None
    destroy: Optional[bool] = Field(default=None, alias="_destroy")


class Estimate(FreeAgentModel):
    root_name: ClassVar[str] = "estimate"
    collection_name: ClassVar[str] = "estimates"

    url: Optional[str] = None
    contact: Optional[str] = None
    project: Optional[str] = None
    invoice: Optional[str] = None
    reference: Optional[str] = None
    estimate_type: Optional[str] = None
    dated_on: OptionalDate = None
    status: Optional[str] = None
    currency: Optional[str] = None
    discount_percent: OptionalDecimal = None
    net_value: OptionalDecimal = None
    sales_tax_value: OptionalDecimal = None
    total_value: OptionalDecimal = None
    involves_sales_tax: Optional[bool] = None
    ec_status: EcStatusValue = None
    notes: Optional[str] = None
    estimate_items: Optional[List[EstimateItem]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Credit notes
# ---------------------------------------------------------------------------

class CreditNoteItem(FreeAgentItem):
    root_name: ClassVar[str] = "credit_note_item"
    collection_name: ClassVar[str] = "credit_note_items"

    url: Optional[str] = None
    id: Optional[str] = None
    position: Optional[int] = None
    item_type: Optional[str] = None
    quantity: OptionalDecimal = None
    price: OptionalDecimal = None
    description: Optional[str] = None
    sales_tax_rate: OptionalDecimal = None
    sales_tax_value: OptionalDecimal = None
    sales_tax_status: SalesTaxStatusValue = None
    category: Optional[str] = None
    destroy: Optional[bool] = Field(default=None, alias="_destroy")


class CreditNote(FreeAgentModel):
    root_name: ClassVar[str] = "credit_note"
    collection_name: ClassVar[str] = "credit_notes"

    url: Optional[str] = None
    contact: Optional[str] = None
    invoice: Optional[str] = None
    project: Optional[str] = None
    reference: Optional[str] = None
    dated_on: OptionalDate = None
    refunded_on: OptionalDate = None
    status: Optional[str] = None
    currency: Optional[str] = None
    exchange_rate: OptionalDecimal = None
    net_value: OptionalDecimal = None
    sales_tax_value: OptionalDecimal = None
    total_value: OptionalDecimal = None
    ec_status: EcStatusValue = None
    reason: Optional[str] = None
    credit_note_items: Optional[List[CreditNoteItem]] = None
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Note(FreeAgentModel):
    """Free-text note attached to a contact or project."""

    root_name: ClassVar[str] = "note"
    collection_name: ClassVar[str] = "notes"
    read_only_fields: ClassVar[frozenset] = frozenset(
        {"url", "parent_url", "author", "created_at", "updated_at"}
    )

    url: Optional[str] = None
    note: Optional[str] = None
    parent_url: Optional[str] = None
    author: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

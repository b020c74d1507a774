"""
Purchase-side records: bills, their line items and hire purchases.
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
    RebillTypeValue,
    SalesTaxStatusValue,
)


class Attachment(FreeAgentItem):
    """File attached to a bill or explanation.

    On upload `data` holds base64 content; on read the API returns a
    `content_src` link instead.
    """

    root_name: ClassVar[str] = "attachment"
    collection_name: ClassVar[str] = "attachments"

    url: Optional[str] = None
    file_name: Optional[str] = None
    content_type: Optional[str] = None
    content_src: Optional[str] = None
    file_size: Optional[int] = None
    description: Optional[str] = None
    data: Optional[str] = None
    expires_at: Optional[datetime] = None


class BillItem(FreeAgentItem):
    root_name: ClassVar[str] = "bill_item"
    collection_name: ClassVar[str] = "bill_items"

    url: Optional[str] = None
    bill: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    total_value: OptionalDecimal = None
    total_value_ex_tax: OptionalDecimal = None
    quantity: OptionalDecimal = None
    unit: Optional[str] = None
    sales_tax_rate: OptionalDecimal = None
    sales_tax_value: OptionalDecimal = None
    sales_tax_status: SalesTaxStatusValue = None
    second_sales_tax_rate: OptionalDecimal = None
    second_sales_tax_value: OptionalDecimal = None
    manual_sales_tax_amount: OptionalDecimal = None
    stock_item: Optional[str] = None
    stock_altering_quantity: OptionalDecimal = None
    capital_asset: Optional[dict] = None
    project: Optional[str] = None
    destroy: Optional[bool] = Field(default=None, alias="_destroy")


class Bill(FreeAgentModel):
    root_name: ClassVar[str] = "bill"
    collection_name: ClassVar[str] = "bills"

    url: Optional[str] = None
    contact: Optional[str] = None
    project: Optional[str] = None
    reference: Optional[str] = None
    dated_on: OptionalDate = None
    due_on: OptionalDate = None
    paid_on: OptionalDate = None
    status: Optional[str] = None
    long_status: Optional[str] = None
    currency: Optional[str] = None
    exchange_rate: OptionalDecimal = None
    net_value: OptionalDecimal = None
    sales_tax_value: OptionalDecimal = None
    total_value: OptionalDecimal = None
    paid_value: OptionalDecimal = None
    due_value: OptionalDecimal = None
    input_total_values_inc_tax: Optional[bool] = None
    ec_status: EcStatusValue = None
    rebill_type: RebillTypeValue = None
    rebill_factor: OptionalDecimal = None
    rebill_to_project: Optional[str] = None
    rebilled_on_invoice_item: Optional[str] = None
    comments: Optional[str] = None
    is_paid_by_hire_purchase: Optional[bool] = None
    recurring: Optional[str] = None
    recurring_end_date: OptionalDate = None
    cis_deduction_band: Optional[str] = None
    cis_deduction_rate: OptionalDecimal = None
    cis_deduction: OptionalDecimal = None
    cis_deduction_suffered: OptionalDecimal = None
    attachment: Optional[Attachment] = None
    bill_items: Optional[List[BillItem]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class HirePurchase(FreeAgentModel):
    root_name: ClassVar[str] = "hire_purchase"
    collection_name: ClassVar[str] = "hire_purchases"

    url: Optional[str] = None
    description: Optional[str] = None
    bill: Optional[str] = None
    liabilities_over_one_year_category: Optional[str] = None
    liabilities_under_one_year_category: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

"""
VAT and self assessment returns.

Returns are addressed by their period end date (`YYYY-MM-DD`) rather than by a
numeric id.
"""

from datetime import datetime
from typing import ClassVar, List, Optional

from src.freeagent.models.base import FreeAgentItem, FreeAgentModel, OptionalDate, OptionalDecimal


class ReturnPayment(FreeAgentItem):
    """A payment line on a VAT or self assessment return."""

    root_name: ClassVar[str] = "payment"
    collection_name: ClassVar[str] = "payments"

    label: Optional[str] = None
    due_on: OptionalDate = None
    amount_due: OptionalDecimal = None
    status: Optional[str] = None


VatReturnPayment = ReturnPayment
SelfAssessmentPayment = ReturnPayment


class VatReturn(FreeAgentModel):
    root_name: ClassVar[str] = "vat_return"
    collection_name: ClassVar[str] = "vat_returns"

    url: Optional[str] = None
    period_starts_on: OptionalDate = None
    period_ends_on: OptionalDate = None
    frequency: Optional[str] = None
    status: Optional[str] = None
    box1_vat_due_on_sales: OptionalDecimal = None
    box2_vat_due_on_acquisitions: OptionalDecimal = None
    box3_total_vat_due: OptionalDecimal = None
    box4_vat_reclaimed: OptionalDecimal = None
    box5_net_vat_due: OptionalDecimal = None
    box6_total_sales_ex_vat: OptionalDecimal = None
    box7_total_purchases_ex_vat: OptionalDecimal = None
    box8_total_supplies_ex_vat: OptionalDecimal = None
    box9_total_acquisitions_ex_vat: OptionalDecimal = None
    filed_on: OptionalDate = None
    filed_online: Optional[bool] = None
    hmrc_reference: Optional[str] = None
    payments: Optional[List[ReturnPayment]] = None


class SelfAssessmentReturn(FreeAgentModel):
    root_name: ClassVar[str] = "self_assessment_return"
    collection_name: ClassVar[str] = "self_assessment_returns"

    url: Optional[str] = None
    user: Optional[str] = None
    period_starts_on: OptionalDate = None
    period_ends_on: OptionalDate = None
    status: Optional[str] = None
    income_tax_due: OptionalDecimal = None
    national_insurance_due: OptionalDecimal = None
    capital_gains_tax_due: OptionalDecimal = None
    student_loan_repayment_due: OptionalDecimal = None
    total_tax_due: OptionalDecimal = None
    payments_on_account_due: OptionalDecimal = None
    filed_on: OptionalDate = None
    filed_online: Optional[bool] = None
    utr_number: Optional[str] = None
    payments: Optional[List[ReturnPayment]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReturnFiling(FreeAgentItem):
    """Body of a mark_as_filed transition.

    Sent under `vat_return` or `self_assessment_return` depending on the return.
    """

    filed_on: OptionalDate = None
    filed_online: Optional[bool] = None
    hmrc_reference: Optional[str] = None
    utr_number: Optional[str] = None

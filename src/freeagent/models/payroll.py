"""
Payroll records for a tax year (`/v2/payroll/{year}`).
"""

from datetime import date, datetime
from typing import ClassVar, List, Optional

from src.freeagent.models.base import (
    FreeAgentItem,
    FreeAgentModel,
    OptionalDate,
    OptionalDecimal,
    resource_id,
)


class Payslip(FreeAgentItem):
    root_name: ClassVar[str] = "payslip"
    collection_name: ClassVar[str] = "payslips"

    url: Optional[str] = None
    user: Optional[str] = None
    dated_on: OptionalDate = None
    gross_salary: OptionalDecimal = None
    net_salary: OptionalDecimal = None
    income_tax: OptionalDecimal = None
    employee_nic: OptionalDecimal = None
    employer_nic: OptionalDecimal = None
    employee_pension: OptionalDecimal = None
    employer_pension: OptionalDecimal = None
    student_loan: OptionalDecimal = None


class PayrollPeriod(FreeAgentModel):
    root_name: ClassVar[str] = "period"
    collection_name: ClassVar[str] = "periods"

    url: Optional[str] = None
    period: Optional[int] = None
    frequency: Optional[str] = None
    dated_on: OptionalDate = None
    status: Optional[str] = None
    employment_allowance_claimed: Optional[bool] = None
    employment_allowance_amount: OptionalDecimal = None
    construction_industry_scheme_deduction: OptionalDecimal = None
    payslips: Optional[List[Payslip]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PayrollPayment(FreeAgentModel):
    root_name: ClassVar[str] = "payment"
    collection_name: ClassVar[str] = "payments"

    url: Optional[str] = None
    user: Optional[str] = None
    dated_on: OptionalDate = None
    status: Optional[str] = None
    amount_due: OptionalDecimal = None
    gross_pay: OptionalDecimal = None
    income_tax: OptionalDecimal = None
    employee_ni: OptionalDecimal = None
    employer_ni: OptionalDecimal = None
    employee_pension: OptionalDecimal = None
    employer_pension: OptionalDecimal = None
    student_loan: OptionalDecimal = None
    net_pay: OptionalDecimal = None
    total_cost: OptionalDecimal = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PayrollYear(FreeAgentModel):
    """Periods and HMRC payments for one payroll year."""

    year: Optional[int] = None
    periods: List[PayrollPeriod] = []
    payments: List[PayrollPayment] = []

    def payslips(
        self,
        user: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> List[Payslip]:
        """Payslips across all periods, optionally for one user and an inclusive date range.

        A payslip without its own `dated_on` takes its period's date.
        """
        slips: List[Payslip] = []
        for period in self.periods:
            for slip in period.payslips or []:
                if user is not None and resource_id(slip.user) != resource_id(user):
                    continue
                dated_on = slip.dated_on or period.dated_on
                if from_date is not None and (dated_on is None or dated_on < from_date):
                    continue
                if to_date is not None and (dated_on is None or dated_on > to_date):
                    continue
                slips.append(slip)
        return slips

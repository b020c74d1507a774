"""
Company-level records: company, users, categories, capital asset types, CIS bands.
"""

from datetime import datetime
from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict

from src.freeagent.models.base import (
    AutoSalesTaxRateValue,
    CategoryGroupValue,
    FreeAgentItem,
    FreeAgentModel,
    OptionalDate,
    OptionalDecimal,
    RoleValue,
)


class Category(FreeAgentModel):
    """A nominal ledger category.

    `category_group` is sent on create. Grouped list and get responses do not
    carry it inline; the client tags it from the group key the record came in
    under (`admin_expenses_categories` -> `admin_expenses`).
    """

    root_name: ClassVar[str] = "category"
    collection_name: ClassVar[str] = "categories"

    url: Optional[str] = None
    nominal_code: Optional[str] = None
    description: Optional[str] = None
    category_type: Optional[str] = None
    category_group: CategoryGroupValue = None
    tax_reporting_name: Optional[str] = None
    auto_sales_tax_rate: AutoSalesTaxRateValue = None
    allowable_for_tax: Optional[bool] = None

    def to_update_payload(self, mode: str = "json") -> dict:
        """Update requests only accept the editable subset of fields."""
        payload = self.to_payload(mode=mode)
        for key in ("nominal_code", "category_group", "category_type"):
            payload.pop(key, None)
        return payload


class SalesTaxRate(FreeAgentItem):
    root_name: ClassVar[str] = "sales_tax_rate"
    collection_name: ClassVar[str] = "sales_tax_rates"

    rate: OptionalDecimal = None
    description: Optional[str] = None
    valid_from: OptionalDate = None
    valid_to: OptionalDate = None


class Company(FreeAgentModel):
    root_name: ClassVar[str] = "company"

    url: Optional[str] = None
    name: Optional[str] = None
    subdomain: Optional[str] = None
    type: Optional[str] = None
    currency: Optional[str] = None
    mileage_units: Optional[str] = None
    company_start_date: OptionalDate = None
    trading_start_date: OptionalDate = None
    first_accounting_year_end: OptionalDate = None
    company_registration_number: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    address3: Optional[str] = None
    town: Optional[str] = None
    region: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    sales_tax_registration_status: Optional[str] = None
    sales_tax_registration_number: Optional[str] = None
    sales_tax_rates: Optional[List[SalesTaxRate]] = None
    sales_tax_effective_date: OptionalDate = None
    supports_auto_sales_tax_on_purchases: Optional[bool] = None
    ec_vat_reporting_enabled: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaxTimelineItem(FreeAgentItem):
    root_name: ClassVar[str] = "timeline_item"
    collection_name: ClassVar[str] = "timeline_items"

    description: Optional[str] = None
    nature: Optional[str] = None
    dated_on: OptionalDate = None
    amount_due: OptionalDecimal = None
    is_personal: Optional[bool] = None


class UserPayrollProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    total_pay_in_previous_employment: OptionalDecimal = None
    total_tax_in_previous_employment: OptionalDecimal = None


class User(FreeAgentModel):
    root_name: ClassVar[str] = "user"
    collection_name: ClassVar[str] = "users"

    url: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role: RoleValue = None
    hidden: Optional[bool] = None
    permission_level: Optional[int] = None
    opening_mileage: OptionalDecimal = None
    ni_number: Optional[str] = None
    unique_tax_reference: Optional[str] = None
    send_invitation: Optional[bool] = None
    current_payroll_profile: Optional[UserPayrollProfile] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


class CapitalAssetType(FreeAgentModel):
    root_name: ClassVar[str] = "capital_asset_type"
    collection_name: ClassVar[str] = "capital_asset_types"
    read_only_fields: ClassVar[frozenset] = frozenset(
        {"url", "system_default", "created_at", "updated_at"}
    )

    url: Optional[str] = None
    name: Optional[str] = None
    system_default: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CisBand(FreeAgentModel):
    root_name: ClassVar[str] = "cis_band"
    collection_name: ClassVar[str] = "available_bands"

    name: Optional[str] = None
    deduction_rate: OptionalDecimal = None
    income_description: Optional[str] = None
    deduction_description: Optional[str] = None
    nominal_code: Optional[str] = None

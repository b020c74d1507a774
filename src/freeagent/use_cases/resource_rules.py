"""Business rules the API enforces, checked client-side before sending.

Each `check_*` function returns a list of human-readable problems (empty when
the record is fine) so callers can report every failure at once.
`validate_record` runs whichever checks apply to a record and raises
`ResourceValidationError` when any fail.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from src.freeagent.integrations.freeagent_errors import ResourceValidationError
from src.freeagent.models.accounting import Category
from src.freeagent.models.enums import (
    AutoSalesTaxRate,
    CategoryGroup,
    EcStatus,
    RebillType,
    StatementFileType,
)

# EC Goods / EC Services stopped applying to GB companies after Brexit.
EC_CUTOFF_DATE = date(2021, 1, 1)

NOMINAL_CODE_RANGES: dict[CategoryGroup, tuple[int, int]] = {
    CategoryGroup.INCOME: (1, 49),
    CategoryGroup.COST_OF_SALES: (96, 199),
    CategoryGroup.ADMIN_EXPENSES: (200, 399),
    CategoryGroup.CURRENT_ASSETS: (671, 720),
    CategoryGroup.LIABILITIES: (731, 780),
    CategoryGroup.EQUITIES: (921, 960),
}

TAX_REPORTING_NAME_GROUPS = frozenset(
    {
        CategoryGroup.COST_OF_SALES,
        CategoryGroup.ADMIN_EXPENSES,
        CategoryGroup.CURRENT_ASSETS,
        CategoryGroup.LIABILITIES,
    }
)
SPENDING_GROUPS = frozenset({CategoryGroup.COST_OF_SALES, CategoryGroup.ADMIN_EXPENSES})
AUTO_SALES_TAX_GROUPS = SPENDING_GROUPS | {CategoryGroup.INCOME}


def check_rebill(rebill_type: RebillType | None, rebill_factor: Decimal | None) -> list[str]:
    """`rebill_factor` is required for markup and price rebilling."""

    if rebill_type in {RebillType.MARKUP, RebillType.PRICE} and rebill_factor is None:
        return [f"rebill_factor is required when rebill_type is '{rebill_type.value}'"]
    return []


def check_ec_status(
    ec_status: EcStatus | None,
    dated_on: date | None,
    company_country: str | None,
) -> list[str]:
    """EC Goods / EC Services are not valid for GB companies from 2021-01-01."""

    if ec_status not in {EcStatus.EC_GOODS, EcStatus.EC_SERVICES}:
        return []
    if (company_country or "").strip().upper() not in {"GB", "UK"}:
        return []
    if dated_on is None or dated_on < EC_CUTOFF_DATE:
        return []
    return [
        f"ec_status '{ec_status.value}' is not valid for GB companies "
        f"on or after {EC_CUTOFF_DATE.isoformat()} (dated_on {dated_on.isoformat()})"
    ]


def nominal_code_range(group: CategoryGroup) -> str:
    low, high = NOMINAL_CODE_RANGES[group]
    return f"{low:03d}-{high:03d}"


def is_valid_nominal_code(nominal_code: str | None, group: CategoryGroup) -> bool:
    try:
        code = int((nominal_code or "").strip())
    except ValueError:
        return False
    low, high = NOMINAL_CODE_RANGES[group]
    return low <= code <= high


def check_category(category: Category, *, creating: bool = True) -> list[str]:
    """Rules for creating (or updating) a category.

    On update the group cannot change and is often unknown; checks that need it
    are skipped when it is missing.
    """

    errors: list[str] = []
    group = category.category_group

    if group is None:
        if creating:
            errors.append("category_group is required when creating a category")
        return errors

    if creating and not is_valid_nominal_code(category.nominal_code, group):
        errors.append(
            f"nominal_code {category.nominal_code!r} is not valid for category group "
            f"'{group.value}' (valid range {nominal_code_range(group)})"
        )

    if group in TAX_REPORTING_NAME_GROUPS and not (category.tax_reporting_name or "").strip():
        errors.append(f"tax_reporting_name is required for category group '{group.value}'")

    if group in SPENDING_GROUPS and category.allowable_for_tax is None:
        errors.append(f"allowable_for_tax is required for category group '{group.value}'")

    rate = category.auto_sales_tax_rate
    if rate is not None:
        if rate is AutoSalesTaxRate.EXEMPT and group is not CategoryGroup.INCOME:
            errors.append("auto_sales_tax_rate 'Exempt' is only valid for income categories")
        elif group not in AUTO_SALES_TAX_GROUPS:
            errors.append(f"auto_sales_tax_rate cannot be applied to category group '{group.value}'")

    return errors


def statement_file_type(file_type: str | StatementFileType) -> StatementFileType:
    """Normalise a statement file type (`OFX`, `.csv`...) or reject it."""

    try:
        return StatementFileType(str(getattr(file_type, "value", file_type)).strip().lstrip("."))
    except ValueError:
        raise ResourceValidationError(
            [f"statement file type must be one of ofx, qif, csv (got {file_type!r})"]
        ) from None


def validate_record(
    record: Any,
    *,
    company_country: str | None = None,
    creating: bool = True,
) -> None:
    """Run every rule that applies to `record`; raise listing all failures."""

    errors: list[str] = []

    if hasattr(record, "rebill_type"):
        errors.extend(check_rebill(record.rebill_type, getattr(record, "rebill_factor", None)))

    if hasattr(record, "ec_status"):
        errors.extend(
            check_ec_status(record.ec_status, getattr(record, "dated_on", None), company_country)
        )

    if isinstance(record, Category):
        errors.extend(check_category(record, creating=creating))

    if errors:
        raise ResourceValidationError(errors)

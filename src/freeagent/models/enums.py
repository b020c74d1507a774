"""
Enumerations used by FreeAgent resources.

Wire values are the exact strings the API sends and expects. Parsing is lenient
about case, spaces, dashes and underscores so `company_secretary`,
`Company Secretary` and `COMPANY-SECRETARY` all land on the same member.
"""

import re
from enum import Enum
from typing import Any, Callable, Optional, Type, TypeVar

E = TypeVar("E", bound="LenientEnum")


def _fold(value: str) -> str:
    return re.sub(r"[\s_\-/]", "", value).lower()


class LenientEnum(str, Enum):
    """String enum that also matches values differing only in case or separators."""

    @classmethod
    def _missing_(cls, value: object):
        if not isinstance(value, str):
            return None
        folded = _fold(value)
        for member in cls:
            if _fold(member.value) == folded or _fold(member.name) == folded:
                return member
        return None


def lenient_enum(enum_cls: Type[E]) -> Callable[[Any], Optional[Any]]:
    """Build a pydantic BeforeValidator body mapping blanks to None and strings to members."""

    def _validate(value: Any) -> Optional[Any]:
        if value is None:
            return None
        if isinstance(value, str):
            if not value.strip():
                return None
            return enum_cls(value.strip())
        return value

    return _validate


# ---------------------------------------------------------------------------
# Sales tax
# ---------------------------------------------------------------------------

class EcStatus(LenientEnum):
    UK_NON_EC = "UK/Non-EC"
    EC_GOODS = "EC Goods"
    EC_SERVICES = "EC Services"
    REVERSE_CHARGE = "Reverse Charge"
    EC_VAT_MOSS = "EC VAT MOSS"


class SalesTaxStatus(LenientEnum):
    TAXABLE = "TAXABLE"
    EXEMPT = "EXEMPT"
    OUT_OF_SCOPE = "OUT_OF_SCOPE"


class AutoSalesTaxRate(LenientEnum):
    OUTSIDE_SCOPE = "Outside of the scope of VAT"
    ZERO_RATE = "Zero rate"
    REDUCED_RATE = "Reduced rate"
    STANDARD_RATE = "Standard rate"
    EXEMPT = "Exempt"


# ---------------------------------------------------------------------------
# Purchases / explanations
# ---------------------------------------------------------------------------

class RebillType(LenientEnum):
    COST = "cost"
    MARKUP = "markup"
    PRICE = "price"


# ---------------------------------------------------------------------------
# Accounting
# ---------------------------------------------------------------------------

class CategoryGroup(LenientEnum):
    INCOME = "income"
    COST_OF_SALES = "cost_of_sales"
    ADMIN_EXPENSES = "admin_expenses"
    CURRENT_ASSETS = "current_assets"
    LIABILITIES = "liabilities"
    EQUITIES = "equities"

    @classmethod
    def from_collection_key(cls, key: str) -> Optional["CategoryGroup"]:
        """Map a grouped list key such as `admin_expenses_categories` to its group.

        `general_categories` has no single group and maps to None.
        """
        stem = key[: -len("_categories")] if key.endswith("_categories") else key
        try:
            return cls(stem)
        except ValueError:
            return None


class Role(LenientEnum):
    OWNER = "Owner"
    DIRECTOR = "Director"
    PARTNER = "Partner"
    COMPANY_SECRETARY = "Company Secretary"
    EMPLOYEE = "Employee"
    SHAREHOLDER = "Shareholder"
    ACCOUNTANT = "Accountant"


class StatementFileType(LenientEnum):
    OFX = "ofx"
    QIF = "qif"
    CSV = "csv"

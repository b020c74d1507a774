"""
Shared base for FreeAgent resource records.

Every resource knows the root key it travels under on the wire (`invoice`) and
the plural key used by list responses (`invoices`). Request payloads are built
from the record itself so the codec never has to know field-level details.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, ClassVar, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, BeforeValidator, ConfigDict

from src.freeagent.models.enums import (
    AutoSalesTaxRate,
    CategoryGroup,
    EcStatus,
    RebillType,
    Role,
    SalesTaxStatus,
    lenient_enum,
)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Scalars tolerant of the empty strings the API occasionally returns.
OptionalDecimal = Annotated[Optional[Decimal], BeforeValidator(_blank_to_none)]
OptionalDate = Annotated[Optional[date], BeforeValidator(_blank_to_none)]

EcStatusValue = Annotated[Optional[EcStatus], BeforeValidator(lenient_enum(EcStatus))]
RebillTypeValue = Annotated[Optional[RebillType], BeforeValidator(lenient_enum(RebillType))]
RoleValue = Annotated[Optional[Role], BeforeValidator(lenient_enum(Role))]
CategoryGroupValue = Annotated[Optional[CategoryGroup], BeforeValidator(lenient_enum(CategoryGroup))]
AutoSalesTaxRateValue = Annotated[
    Optional[AutoSalesTaxRate], BeforeValidator(lenient_enum(AutoSalesTaxRate))
]
SalesTaxStatusValue = Annotated[Optional[SalesTaxStatus], BeforeValidator(lenient_enum(SalesTaxStatus))]


def resource_id(url: Optional[str]) -> Optional[str]:
    """Return the trailing identifier of a resource URL.

    `https://api.freeagent.com/v2/invoices/42` -> `42`
    """
    if not url:
        return None
    path = urlparse(url).path.rstrip("/")
    if not path:
        return None
    return path.rsplit("/", 1)[-1] or None


class FreeAgentModel(BaseModel):
    """Base class for every record exchanged with the API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    root_name: ClassVar[str] = ""
    collection_name: ClassVar[str] = ""
    read_only_fields: ClassVar[frozenset] = frozenset({"url", "created_at", "updated_at"})

    @property
    def resource_id(self) -> Optional[str]:
        return resource_id(getattr(self, "url", None))

    def to_payload(self, mode: str = "json") -> dict[str, Any]:
        """Request body content for this record (without the root key).

        `mode="python"` keeps Decimal/date values typed, which the XML writer
        needs for its `type` attributes.
        """
        return self.model_dump(
            mode=mode,
            by_alias=True,
            exclude_none=True,
            exclude=set(self.read_only_fields),
        )


class FreeAgentItem(FreeAgentModel):
    """Nested line record (invoice item, bill item...).

    Nested items keep their `url` in requests: the API uses it to match
    existing lines on update.
    """

    read_only_fields: ClassVar[frozenset] = frozenset({"created_at", "updated_at"})

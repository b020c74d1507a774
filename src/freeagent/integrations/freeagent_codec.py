"""Request/response codec for the FreeAgent API.

The API speaks JSON and XML. Both decode to the same plain mapping shape so
the typed models never see the wire format:

    {"invoice": {"dated_on": "2024-01-31", "invoice_items": [{...}]}}

XML documents are wrapped in `<freeagent>`, use dashed element names and
annotate scalars with a `type` attribute:

    <freeagent>
      <invoice>
        <dated-on type="date">2024-01-31</dated-on>
        <invoice-items type="array">
          <invoice-item>...</invoice-item>
        </invoice-items>
      </invoice>
    </freeagent>
"""

from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, TypeVar

from pydantic import ValidationError

from src.freeagent.integrations.freeagent_errors import FreeAgentDecodeError
from src.freeagent.models.base import FreeAgentModel

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=FreeAgentModel)

XML_ROOT = "freeagent"


class PayloadFormat(str, Enum):
    JSON = "json"
    XML = "xml"

    @property
    def media_type(self) -> str:
        return "application/json" if self is PayloadFormat.JSON else "application/xml"


def format_for_content_type(
    content_type: str | None, default: PayloadFormat = PayloadFormat.JSON
) -> PayloadFormat:
    """Pick the decoder for a response from its Content-Type header."""

    ct = (content_type or "").lower()
    if "json" in ct:
        return PayloadFormat.JSON
    if "xml" in ct:
        return PayloadFormat.XML
    return default


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------

def dasherize(name: str) -> str:
    # Leading underscores (`_destroy`) are kept: an element name cannot start with `-`.
    return re.sub(r"(?<=[0-9A-Za-z])_", "-", name)


def underscore(name: str) -> str:
    return name.replace("-", "_")


def singularize(name: str) -> str:
    """Child element name for the items of an array field."""

    if name.endswith("ies"):
        return name[:-3] + "y"
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _record_payload(record: Any) -> Any:
    if isinstance(record, FreeAgentModel):
        return record.to_payload(mode="python")
    if isinstance(record, (list, tuple)):
        return [_record_payload(item) for item in record]
    return {k: v for k, v in dict(record).items() if v is not None}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, FreeAgentModel):
        return value.to_payload(mode="python")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _xml_scalar(value: Any) -> tuple[str, str | None]:
    """Return (text, type attribute) for a scalar value."""

    if isinstance(value, Enum):
        return str(value.value), None
    if isinstance(value, bool):
        return ("true" if value else "false"), "boolean"
    if isinstance(value, int):
        return str(value), "integer"
    if isinstance(value, Decimal):
        return str(value), "decimal"
    if isinstance(value, float):
        return repr(value), "decimal"
    if isinstance(value, datetime):
        return value.isoformat(), "datetime"
    if isinstance(value, date):
        return value.isoformat(), "date"
    return str(value), None


def _append_xml(parent: ET.Element, name: str, value: Any) -> None:
    el = ET.SubElement(parent, dasherize(name))
    if value is None:
        el.set("nil", "true")
        return
    if isinstance(value, FreeAgentModel):
        value = value.to_payload(mode="python")
    if isinstance(value, Mapping):
        for key, child in value.items():
            if child is not None:
                _append_xml(el, key, child)
        return
    if isinstance(value, (list, tuple)):
        el.set("type", "array")
        item_name = singularize(name)
        for item in value:
            _append_xml(el, item_name, item)
        return
    text, type_attr = _xml_scalar(value)
    if type_attr:
        el.set("type", type_attr)
    el.text = text


def encode(
    root_name: str,
    record: FreeAgentModel | Mapping[str, Any] | list[Any],
    fmt: PayloadFormat = PayloadFormat.JSON,
) -> bytes:
    """Wrap `record` under `root_name` and serialise it.

    Fields without a value are left out. Decimals go out as strings, dates as
    `YYYY-MM-DD`. A list of records becomes an array under the root key.
    """

    payload = _record_payload(record)
    if fmt is PayloadFormat.XML:
        doc = ET.Element(XML_ROOT)
        _append_xml(doc, root_name, payload)
        return ET.tostring(doc, encoding="utf-8", xml_declaration=True)
    return json.dumps({root_name: payload}, default=_json_default).encode("utf-8")


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _xml_value(el: ET.Element) -> Any:
    if el.get("nil") == "true":
        return None

    type_attr = el.get("type")
    children = list(el)

    if type_attr == "array":
        return [_xml_value(child) for child in children]

    # Repeated items without an array marker: <invoice-items><invoice-item/>...
    if len(children) > 1 and all(child.tag == singularize(el.tag) for child in children):
        return [_xml_value(child) for child in children]

    if children:
        out: dict[str, Any] = {}
        for child in children:
            key = underscore(child.tag)
            value = _xml_value(child)
            if key in out:
                # Repeated element without an array marker.
                existing = out[key]
                if not isinstance(existing, list):
                    out[key] = [existing]
                out[key].append(value)
            else:
                out[key] = value
        return out

    text = (el.text or "").strip()
    if type_attr == "integer":
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            raise FreeAgentDecodeError(f"Invalid integer in <{el.tag}>: {text!r}") from None
    if type_attr == "boolean":
        return text.lower() == "true" if text else None
    if type_attr in {"decimal", "float", "date", "datetime"} and not text:
        return None
    return text


def _decode_xml(body: bytes) -> dict[str, Any]:
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise FreeAgentDecodeError(f"Invalid XML response: {e}", body=_safe_text(body)) from e

    try:
        if root.tag == XML_ROOT:
            value = _xml_value(root)
            return value if isinstance(value, dict) else {}
        return {underscore(root.tag): _xml_value(root)}
    except FreeAgentDecodeError as e:
        raise FreeAgentDecodeError(str(e), body=_safe_text(body)) from None


def _safe_text(body: bytes | str) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def decode(body: bytes | str | None, fmt: PayloadFormat = PayloadFormat.JSON) -> dict[str, Any]:
    """Turn a response body into a plain mapping. Empty bodies decode to `{}`."""

    if body is None:
        return {}
    raw = body.encode("utf-8") if isinstance(body, str) else body
    if not raw.strip():
        return {}

    if fmt is PayloadFormat.XML:
        return _decode_xml(raw)

    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise FreeAgentDecodeError(f"Invalid JSON response: {e}", body=_safe_text(raw)) from e
    if not isinstance(payload, dict):
        raise FreeAgentDecodeError(
            "Expected a JSON object at the top level", body=_safe_text(raw)
        )
    return payload


def parse_one(payload: Mapping[str, Any], model: type[M], root_name: str | None = None) -> M:
    """Validate the record found under the singular root key."""

    root = root_name or model.root_name
    if root not in payload or not isinstance(payload[root], Mapping):
        raise FreeAgentDecodeError(
            f"Response has no '{root}' object (keys: {sorted(payload)})"
        )
    try:
        return model.model_validate(payload[root])
    except ValidationError as e:
        raise FreeAgentDecodeError(f"Could not parse '{root}': {e}") from e


def collection_items(value: Any, collection_name: str) -> list[Any]:
    """Normalise the value found under a collection key into a list of records.

    XML collections without `type="array"` decode as `{"invoice": [...]}` (or a
    single `{"invoice": {...}}`); those are unwrapped to their records.
    """

    if value is None:
        return []
    if isinstance(value, str):
        # An empty XML collection element without `type="array"`.
        if value.strip():
            raise FreeAgentDecodeError(f"Expected records under '{collection_name}', got text")
        return []
    if isinstance(value, Mapping):
        item_key = singularize(collection_name)
        inner = value.get(item_key) if list(value) == [item_key] else None
        if isinstance(inner, Mapping):
            return [inner]
        if isinstance(inner, list):
            return inner
        return [value]
    return list(value)


def parse_many(
    payload: Mapping[str, Any], model: type[M], collection_name: str | None = None
) -> list[M]:
    """Validate the records found under the plural root key.

    A missing or null collection reads as empty.
    """

    key = collection_name or model.collection_name
    items = collection_items(payload.get(key), key)
    if not items:
        logger.debug(f"Response has no '{key}' records; treating as empty")
        return []
    try:
        return [model.model_validate(item) for item in items]
    except ValidationError as e:
        raise FreeAgentDecodeError(f"Could not parse '{key}': {e}") from e

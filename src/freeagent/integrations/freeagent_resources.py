"""Endpoint objects for each FreeAgent resource.

Each class is a thin wrapper: it builds the path and query string, encodes the
request record, runs the client-side rules and parses the response into typed
models. Records can be referenced by bare id, by full resource URL, or by a
model instance carrying its `url`.
"""

from __future__ import annotations

import base64
import logging
import os
from datetime import date
from typing import TYPE_CHECKING, Any, Generic, Iterable, Mapping, TypeVar

from src.freeagent.integrations.freeagent_codec import encode, parse_many, parse_one
from src.freeagent.integrations.freeagent_errors import (
    FreeAgentDecodeError,
    FreeAgentNotFoundError,
    ResourceValidationError,
)
from src.freeagent.models.accounting import (
    CapitalAssetType,
    Category,
    CisBand,
    Company,
    TaxTimelineItem,
    User,
)
from src.freeagent.models.banking import (
    BankAccount,
    BankStatementUpload,
    BankTransaction,
    BankTransactionExplanation,
    StatementLine,
)
from src.freeagent.models.base import FreeAgentModel, resource_id
from src.freeagent.models.enums import CategoryGroup, Role, StatementFileType
from src.freeagent.models.payroll import PayrollPayment, PayrollPeriod, PayrollYear, Payslip
from src.freeagent.models.purchases import Bill, HirePurchase
from src.freeagent.models.sales import (
    Contact,
    CreditNote,
    Estimate,
    Invoice,
    InvoiceEmail,
    Note,
    Project,
)
from src.freeagent.models.tax import ReturnFiling, SelfAssessmentReturn, VatReturn
from src.freeagent.use_cases.resource_rules import statement_file_type, validate_record

if TYPE_CHECKING:
    from src.freeagent.integrations.freeagent_client import FreeAgentClient

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=FreeAgentModel)

Ref = Any  # bare id, full URL, or a model with a `url`


def _ref_text(ref: Ref) -> str:
    if isinstance(ref, FreeAgentModel):
        url = getattr(ref, "url", None)
        if not url:
            raise ValueError(f"{type(ref).__name__} has no url; save it before referencing it")
        return url
    text = str(ref).strip()
    if not text:
        raise ValueError("Empty resource reference")
    return text


def _is_url(text: str) -> bool:
    return text.startswith(("http://", "https://"))


def _date_segment(value: date | str) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _decode_pdf(payload: Mapping[str, Any]) -> bytes:
    pdf = payload.get("pdf")
    content = pdf.get("content") if isinstance(pdf, Mapping) else None
    if not content:
        raise FreeAgentDecodeError("Response has no 'pdf.content'")
    return base64.b64decode(content)


class ResourceEndpoint(Generic[M]):
    """Shared plumbing for one `/v2/<collection>` endpoint."""

    path: str = ""
    model: type[M]

    def __init__(self, client: "FreeAgentClient") -> None:
        self._client = client

    # -- references -----------------------------------------------------

    def _item_path(self, ref: Ref, *suffix: str) -> str:
        text = _ref_text(ref)
        base = text if _is_url(text) else f"{self.path}/{text.strip('/')}"
        return "/".join([base.rstrip("/"), *suffix])

    def _url_for(self, collection_path: str, ref: Ref | None) -> str | None:
        """Absolute URL of another resource, as list filters expect."""
        if ref is None:
            return None
        text = _ref_text(ref)
        if _is_url(text):
            return text
        return f"{self._client.base_url}{collection_path}/{text}"

    def _required_url(self, collection_path: str, ref: Ref | None, name: str) -> str:
        if ref is None:
            raise ValueError(f"{name} is required")
        return self._url_for(collection_path, ref)

    def _bank_account_url(self, bank_account: Ref | None) -> str:
        return self._required_url("/v2/bank_accounts", bank_account, "bank_account")

    # -- helpers --------------------------------------------------------

    def _validate(self, record: FreeAgentModel, *, creating: bool) -> None:
        validate_record(record, company_country=self._client.company_country, creating=creating)

    def _encode(self, record: Any, root_name: str | None = None) -> bytes:
        return encode(root_name or self.model.root_name, record, self._client.payload_format)

    def _maybe_one(self, payload: Mapping[str, Any], model: type[FreeAgentModel] | None = None):
        model = model or self.model
        if model.root_name not in payload:
            return None
        return parse_one(payload, model)

    def _list(self, params: Mapping[str, Any] | None = None, path: str | None = None) -> list[M]:
        items = self._client.get_all(path or self.path, self.model.collection_name, params=params)
        return parse_many({self.model.collection_name: items}, self.model)

    def _get(self, ref: Ref) -> M:
        return parse_one(self._client.get(self._item_path(ref)), self.model)

    def _create(self, record: M, *, params: Mapping[str, Any] | None = None) -> M:
        self._validate(record, creating=True)
        payload = self._client.post(self.path, body=self._encode(record), params=params)
        return parse_one(payload, self.model)

    def _update(self, ref: Ref, record: M) -> M | None:
        self._validate(record, creating=False)
        payload = self._client.put(self._item_path(ref), body=self._encode(record))
        return self._maybe_one(payload)

    def _delete(self, ref: Ref) -> None:
        self._client.delete(self._item_path(ref))


class CrudEndpoint(ResourceEndpoint[M]):
    def get(self, ref: Ref) -> M:
        return self._get(ref)

    def create(self, record: M) -> M:
        return self._create(record)

    def update(self, ref: Ref, record: M) -> M | None:
        return self._update(ref, record)

    def delete(self, ref: Ref) -> None:
        self._delete(ref)


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------

class Contacts(CrudEndpoint[Contact]):
    path = "/v2/contacts"
    model = Contact

    def list(
        self,
        *,
        view: str | None = None,
        sort: str | None = None,
        updated_since: str | None = None,
    ) -> list[Contact]:
        return self._list({"view": view, "sort": sort, "updated_since": updated_since})


class Projects(CrudEndpoint[Project]):
    path = "/v2/projects"
    model = Project

    def list(self, *, view: str | None = None, contact: Ref | None = None) -> list[Project]:
        return self._list({"view": view, "contact": self._url_for("/v2/contacts", contact)})


class _SalesDocuments(CrudEndpoint[M]):
    """Invoices, estimates and credit notes share transitions, email and PDF."""

    transitions: frozenset[str] = frozenset()

    def _transition(self, ref: Ref, name: str) -> None:
        if name not in self.transitions:
            raise ValueError(f"Unknown {self.model.root_name} transition: {name}")
        self._client.put(self._item_path(ref, "transitions", name))

    def send_email(self, ref: Ref, email: InvoiceEmail) -> None:
        body = self._encode({"email": email.to_payload(mode="python")})
        self._client.post(self._item_path(ref, "send_email"), body=body)

    def pdf(self, ref: Ref) -> bytes:
        return _decode_pdf(self._client.get(self._item_path(ref, "pdf")))


class Invoices(_SalesDocuments[Invoice]):
    path = "/v2/invoices"
    model = Invoice
    transitions = frozenset(
        {"mark_as_sent", "mark_as_draft", "mark_as_scheduled", "mark_as_cancelled", "convert_to_credit_note"}
    )

    def list(
        self,
        *,
        view: str | None = None,
        updated_since: str | None = None,
        sort: str | None = None,
        nested_invoice_items: bool | None = None,
        contact: Ref | None = None,
        project: Ref | None = None,
    ) -> list[Invoice]:
        return self._list(
            {
                "view": view,
                "updated_since": updated_since,
                "sort": sort,
                "nested_invoice_items": nested_invoice_items,
                "contact": self._url_for("/v2/contacts", contact),
                "project": self._url_for("/v2/projects", project),
            }
        )

    def mark_as_sent(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_sent")

    def mark_as_draft(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_draft")

    def mark_as_scheduled(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_scheduled")

    def mark_as_cancelled(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_cancelled")

    def convert_to_credit_note(self, ref: Ref) -> None:
        self._transition(ref, "convert_to_credit_note")

    def duplicate(self, ref: Ref) -> Invoice:
        return parse_one(self._client.post(self._item_path(ref, "duplicate")), Invoice)


class Estimates(_SalesDocuments[Estimate]):
    path = "/v2/estimates"
    model = Estimate
    transitions = frozenset(
        {"mark_as_sent", "mark_as_draft", "mark_as_approved", "mark_as_rejected", "convert_to_invoice"}
    )

    def list(
        self,
        *,
        view: str | None = None,
        contact: Ref | None = None,
        project: Ref | None = None,
        invoice: Ref | None = None,
        from_date: date | str | None = None,
        to_date: date | str | None = None,
        updated_since: str | None = None,
        nested_estimate_items: bool | None = None,
    ) -> list[Estimate]:
        return self._list(
            {
                "view": view,
                "contact": self._url_for("/v2/contacts", contact),
                "project": self._url_for("/v2/projects", project),
                "invoice": self._url_for("/v2/invoices", invoice),
                "from_date": from_date,
                "to_date": to_date,
                "updated_since": updated_since,
                "nested_estimate_items": nested_estimate_items,
            }
        )

    def mark_as_sent(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_sent")

    def mark_as_draft(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_draft")

    def mark_as_approved(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_approved")

    def mark_as_rejected(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_rejected")

    def convert_to_invoice(self, ref: Ref) -> None:
        self._transition(ref, "convert_to_invoice")

    def duplicate(self, ref: Ref) -> Estimate:
        return parse_one(self._client.post(self._item_path(ref, "duplicate")), Estimate)


class CreditNotes(_SalesDocuments[CreditNote]):
    path = "/v2/credit_notes"
    model = CreditNote
    transitions = frozenset({"mark_as_sent", "mark_as_draft", "mark_as_cancelled"})

    def list(
        self,
        *,
        view: str | None = None,
        contact: Ref | None = None,
        project: Ref | None = None,
        updated_since: str | None = None,
    ) -> list[CreditNote]:
        return self._list(
            {
                "view": view,
                "contact": self._url_for("/v2/contacts", contact),
                "project": self._url_for("/v2/projects", project),
                "updated_since": updated_since,
            }
        )

    def mark_as_sent(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_sent")

    def mark_as_draft(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_draft")

    def mark_as_cancelled(self, ref: Ref) -> None:
        self._transition(ref, "mark_as_cancelled")


class Notes(ResourceEndpoint[Note]):
    path = "/v2/notes"
    model = Note

    def _parent_params(self, contact: Ref | None, project: Ref | None) -> dict[str, str | None]:
        if (contact is None) == (project is None):
            raise ValueError("Pass exactly one of contact= or project=")
        return {
            "contact": self._url_for("/v2/contacts", contact),
            "project": self._url_for("/v2/projects", project),
        }

    def list(self, *, contact: Ref | None = None, project: Ref | None = None) -> list[Note]:
        return self._list(self._parent_params(contact, project))

    def get(self, ref: Ref) -> Note:
        return self._get(ref)

    def create(self, text: str, *, contact: Ref | None = None, project: Ref | None = None) -> Note:
        return self._create(Note(note=text), params=self._parent_params(contact, project))

    def update(self, ref: Ref, text: str) -> Note | None:
        return self._update(ref, Note(note=text))

    def delete(self, ref: Ref) -> None:
        self._delete(ref)


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------

class Bills(CrudEndpoint[Bill]):
    path = "/v2/bills"
    model = Bill

    def list(
        self,
        *,
        view: str | None = None,
        from_date: date | str | None = None,
        to_date: date | str | None = None,
        updated_since: str | None = None,
        contact: Ref | None = None,
        project: Ref | None = None,
        nested_bill_items: bool | None = None,
    ) -> list[Bill]:
        return self._list(
            {
                "view": view,
                "from_date": from_date,
                "to_date": to_date,
                "updated_since": updated_since,
                "contact": self._url_for("/v2/contacts", contact),
                "project": self._url_for("/v2/projects", project),
                "nested_bill_items": nested_bill_items,
            }
        )


class HirePurchases(ResourceEndpoint[HirePurchase]):
    path = "/v2/hire_purchases"
    model = HirePurchase

    def list(self) -> list[HirePurchase]:
        return self._list()

    def get(self, ref: Ref) -> HirePurchase:
        return self._get(ref)


# ---------------------------------------------------------------------------
# Banking
# ---------------------------------------------------------------------------

class BankAccounts(CrudEndpoint[BankAccount]):
    path = "/v2/bank_accounts"
    model = BankAccount

    def list(self, *, view: str | None = None) -> list[BankAccount]:
        return self._list({"view": view})


class BankTransactions(ResourceEndpoint[BankTransaction]):
    path = "/v2/bank_transactions"
    model = BankTransaction

    def list(
        self,
        bank_account: Ref,
        *,
        view: str | None = None,
        from_date: date | str | None = None,
        to_date: date | str | None = None,
        updated_since: str | None = None,
    ) -> list[BankTransaction]:
        return self._list(
            {
                "bank_account": self._bank_account_url(bank_account),
                "view": view,
                "from_date": from_date,
                "to_date": to_date,
                "updated_since": updated_since,
            }
        )

    def get(self, ref: Ref) -> BankTransaction:
        return self._get(ref)

    def delete(self, ref: Ref) -> None:
        self._delete(ref)

    def _upload_result(self, payload: Mapping[str, Any]) -> BankStatementUpload:
        if BankStatementUpload.root_name in payload:
            return parse_one(payload, BankStatementUpload)
        # Some responses carry only the imported transactions.
        if BankTransaction.collection_name in payload:
            txs = parse_many(payload, BankTransaction)
            return BankStatementUpload(imported_transaction_count=len(txs), bank_transactions=txs)
        return BankStatementUpload()

    def upload_statement(
        self,
        bank_account: Ref,
        statement: bytes | str | os.PathLike,
        file_type: str | StatementFileType,
        *,
        file_name: str | None = None,
    ) -> BankStatementUpload:
        """Upload an OFX/QIF/CSV statement file as multipart form data.

        `statement` is the file content (`bytes` or `str`), or an
        `os.PathLike` such as `pathlib.Path` pointing at the file.
        """

        kind = statement_file_type(file_type)
        if isinstance(statement, os.PathLike):
            with open(statement, "rb") as f:
                content = f.read()
            file_name = file_name or os.path.basename(os.fspath(statement))
        else:
            content = statement.encode("utf-8") if isinstance(statement, str) else statement
        if not content or not content.strip():
            raise ResourceValidationError(["statement content cannot be empty"])

        files = {"statement": (file_name or f"statement.{kind.value}", content)}
        payload = self._client.post(
            f"{self.path}/statement",
            params={"bank_account": self._bank_account_url(bank_account)},
            files=files,
        )
        logger.info(f"Uploaded {kind.value} statement to bank account {resource_id(_ref_text(bank_account))}")
        return self._upload_result(payload)

    def upload_transactions(
        self, bank_account: Ref, lines: Iterable[StatementLine | Mapping[str, Any]]
    ) -> BankStatementUpload:
        """Upload transactions as a JSON/XML array instead of a file."""

        records = [
            line if isinstance(line, StatementLine) else StatementLine.model_validate(line)
            for line in lines
        ]
        if not records:
            raise ValueError("upload_transactions needs at least one line")
        payload = self._client.post(
            f"{self.path}/statement",
            params={"bank_account": self._bank_account_url(bank_account)},
            body=encode("statement", records, self._client.payload_format),
        )
        return self._upload_result(payload)


class BankTransactionExplanations(CrudEndpoint[BankTransactionExplanation]):
    path = "/v2/bank_transaction_explanations"
    model = BankTransactionExplanation

    def list(
        self,
        bank_account: Ref,
        *,
        from_date: date | str | None = None,
        to_date: date | str | None = None,
        updated_since: str | None = None,
    ) -> list[BankTransactionExplanation]:
        return self._list(
            {
                "bank_account": self._bank_account_url(bank_account),
                "from_date": from_date,
                "to_date": to_date,
                "updated_since": updated_since,
            }
        )


# ---------------------------------------------------------------------------
# Accounting
# ---------------------------------------------------------------------------

def _tagged_categories(key: str, value: Any) -> list[Category]:
    group = CategoryGroup.from_collection_key(key)
    rows = value if isinstance(value, list) else [value]
    out: list[Category] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        category = Category.model_validate(row)
        if category.category_group is None and group is not None:
            category.category_group = group
        out.append(category)
    return out


class Categories(ResourceEndpoint[Category]):
    """Categories are addressed by nominal code and come back grouped.

    List responses look like `{"admin_expenses_categories": [...],
    "income_categories": [...], ...}`; single records are keyed the same way.
    """

    path = "/v2/categories"
    model = Category

    def _parse_single(self, payload: Mapping[str, Any]) -> Category:
        if Category.root_name in payload:
            return parse_one(payload, Category)
        for key, value in payload.items():
            if key.endswith("_categories") and value:
                found = _tagged_categories(key, value)
                if found:
                    return found[0]
        raise FreeAgentDecodeError(f"Response has no category (keys: {sorted(payload)})")

    def list(self, *, sub_accounts: bool | None = None) -> list[Category]:
        payload = self._client.get(self.path, params={"sub_accounts": sub_accounts})
        out: list[Category] = []
        for key, value in payload.items():
            if key.endswith("_categories") and value:
                out.extend(_tagged_categories(key, value))
        return out

    def get(self, ref: Ref) -> Category:
        return self._parse_single(self._client.get(self._item_path(ref)))

    def get_by_nominal_code(self, nominal_code: str) -> Category | None:
        try:
            return self.get(nominal_code)
        except FreeAgentNotFoundError:
            return None

    def create(self, category: Category) -> Category:
        self._validate(category, creating=True)
        payload = self._client.post(self.path, body=self._encode(category))
        return self._parse_single(payload)

    def update(self, ref: Ref, category: Category) -> Category | None:
        self._validate(category, creating=False)
        body = self._encode(category.to_update_payload(mode="python"))
        payload = self._client.put(self._item_path(ref), body=body)
        return self._parse_single(payload) if payload else None

    def delete(self, ref: Ref) -> None:
        self._delete(ref)


class Users(CrudEndpoint[User]):
    path = "/v2/users"
    model = User

    def list(self, *, view: str | None = None) -> list[User]:
        return self._list({"view": view})

    def me(self) -> User:
        return parse_one(self._client.get(f"{self.path}/me"), User)

    def _active_with_role(self, role: Role) -> list[User]:
        return [u for u in self.list() if u.role is role and not u.hidden]

    def employees(self) -> list[User]:
        """Visible users with the Employee role, by last name."""
        return sorted(self._active_with_role(Role.EMPLOYEE), key=lambda u: u.last_name or "")

    def directors(self) -> list[User]:
        return self._active_with_role(Role.DIRECTOR)


class CompanyEndpoint(ResourceEndpoint[Company]):
    path = "/v2/company"
    model = Company

    def get(self) -> Company:
        return parse_one(self._client.get(self.path), Company)

    def business_categories(self) -> list[str]:
        payload = self._client.get(f"{self.path}/business_categories")
        return [str(c) for c in payload.get("business_categories") or []]

    def tax_timeline(self) -> list[TaxTimelineItem]:
        return parse_many(self._client.get(f"{self.path}/tax_timeline"), TaxTimelineItem)


class CapitalAssetTypes(CrudEndpoint[CapitalAssetType]):
    path = "/v2/capital_asset_types"
    model = CapitalAssetType

    def list(self) -> list[CapitalAssetType]:
        return self._list()


class CisBands(ResourceEndpoint[CisBand]):
    path = "/v2/cis_bands"
    model = CisBand

    def list(self) -> list[CisBand]:
        return parse_many(self._client.get(self.path), CisBand)


# ---------------------------------------------------------------------------
# Tax
# ---------------------------------------------------------------------------

class VatReturns(ResourceEndpoint[VatReturn]):
    """VAT returns are addressed by period end date (`YYYY-MM-DD`)."""

    path = "/v2/vat_returns"
    model = VatReturn

    def list(self) -> list[VatReturn]:
        return self._list()

    def get(self, period_ends_on: date | str) -> VatReturn:
        return self._get(_date_segment(period_ends_on))

    def mark_as_filed(
        self,
        period_ends_on: date | str,
        *,
        filed_on: date,
        filed_online: bool = False,
        hmrc_reference: str | None = None,
    ) -> VatReturn | None:
        filing = ReturnFiling(filed_on=filed_on, filed_online=filed_online, hmrc_reference=hmrc_reference)
        payload = self._client.put(
            self._item_path(_date_segment(period_ends_on), "mark_as_filed"),
            body=self._encode(filing, "vat_return"),
        )
        return self._maybe_one(payload)

    def mark_as_unfiled(self, period_ends_on: date | str) -> VatReturn | None:
        payload = self._client.put(self._item_path(_date_segment(period_ends_on), "mark_as_unfiled"))
        return self._maybe_one(payload)

    def _payment(self, period_ends_on: date | str, payment_date: date | str, action: str) -> VatReturn | None:
        path = self._item_path(
            _date_segment(period_ends_on), "payments", _date_segment(payment_date), action
        )
        return self._maybe_one(self._client.put(path))

    def mark_payment_as_paid(self, period_ends_on: date | str, payment_date: date | str) -> VatReturn | None:
        return self._payment(period_ends_on, payment_date, "mark_as_paid")

    def mark_payment_as_unpaid(self, period_ends_on: date | str, payment_date: date | str) -> VatReturn | None:
        return self._payment(period_ends_on, payment_date, "mark_as_unpaid")


class SelfAssessmentReturns(ResourceEndpoint[SelfAssessmentReturn]):
    """Per-user returns under `/v2/users/{user}/self_assessment_returns`."""

    model = SelfAssessmentReturn

    def _base(self, user: Ref) -> str:
        user_id = resource_id(_ref_text(user))
        return f"/v2/users/{user_id}/self_assessment_returns"

    def _return_path(self, user: Ref, period_ends_on: date | str, *suffix: str) -> str:
        return "/".join([self._base(user), _date_segment(period_ends_on), *suffix])

    def list(self, user: Ref) -> list[SelfAssessmentReturn]:
        return self._list(path=self._base(user))

    def get(self, user: Ref, period_ends_on: date | str) -> SelfAssessmentReturn:
        return parse_one(self._client.get(self._return_path(user, period_ends_on)), SelfAssessmentReturn)

    def mark_as_filed(
        self,
        user: Ref,
        period_ends_on: date | str,
        *,
        filed_on: date,
        filed_online: bool = False,
        utr_number: str | None = None,
    ) -> SelfAssessmentReturn | None:
        filing = ReturnFiling(filed_on=filed_on, filed_online=filed_online, utr_number=utr_number)
        payload = self._client.put(
            self._return_path(user, period_ends_on, "mark_as_filed"),
            body=self._encode(filing, "self_assessment_return"),
        )
        return self._maybe_one(payload)

    def mark_as_unfiled(self, user: Ref, period_ends_on: date | str) -> SelfAssessmentReturn | None:
        return self._maybe_one(self._client.put(self._return_path(user, period_ends_on, "mark_as_unfiled")))

    def mark_payment_as_paid(
        self, user: Ref, period_ends_on: date | str, payment_date: date | str
    ) -> SelfAssessmentReturn | None:
        path = self._return_path(user, period_ends_on, "payments", _date_segment(payment_date), "mark_as_paid")
        return self._maybe_one(self._client.put(path))

    def mark_payment_as_unpaid(
        self, user: Ref, period_ends_on: date | str, payment_date: date | str
    ) -> SelfAssessmentReturn | None:
        path = self._return_path(user, period_ends_on, "payments", _date_segment(payment_date), "mark_as_unpaid")
        return self._maybe_one(self._client.put(path))


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------

class Payroll(ResourceEndpoint[PayrollPeriod]):
    path = "/v2/payroll"
    model = PayrollPeriod

    def year(self, year: int) -> PayrollYear:
        payload = self._client.get(f"{self.path}/{int(year)}")
        return PayrollYear(
            year=int(year),
            periods=parse_many(payload, PayrollPeriod),
            payments=parse_many(payload, PayrollPayment),
        )

    def period(self, year: int, period: int) -> PayrollPeriod:
        return parse_one(self._client.get(f"{self.path}/{int(year)}/{int(period)}"), PayrollPeriod)

    def mark_payment_as_paid(self, year: int, payment_date: date | str) -> None:
        self._client.put(f"{self.path}/{int(year)}/payments/{_date_segment(payment_date)}/mark_as_paid")

    def mark_payment_as_unpaid(self, year: int, payment_date: date | str) -> None:
        self._client.put(f"{self.path}/{int(year)}/payments/{_date_segment(payment_date)}/mark_as_unpaid")


class Payslips:
    """Payslips flattened from the periods of a payroll year."""

    def __init__(self, client: "FreeAgentClient") -> None:
        self._client = client

    def list(
        self,
        year: int,
        *,
        user: Ref | None = None,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[Payslip]:
        payroll = self._client.payroll
        periods: list[PayrollPeriod] = []
        for period in payroll.year(year).periods:
            if from_date is not None and period.dated_on is not None and period.dated_on < from_date:
                continue
            if to_date is not None and period.dated_on is not None and period.dated_on > to_date:
                continue
            if period.payslips is None and period.period is not None:
                period = payroll.period(year, period.period)
            periods.append(period)
        user_ref = _ref_text(user) if user is not None else None
        return PayrollYear(year=int(year), periods=periods).payslips(
            user_ref, from_date=from_date, to_date=to_date
        )


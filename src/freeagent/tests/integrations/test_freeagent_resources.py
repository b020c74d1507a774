from __future__ import annotations

import base64
import json
from datetime import date
from decimal import Decimal

import pytest

from src.freeagent.integrations.freeagent_errors import ResourceValidationError
from src.freeagent.models import (
    BankTransactionExplanation,
    Bill,
    Category,
    CategoryGroup,
    EcStatus,
    Invoice,
    InvoiceEmail,
    InvoiceItem,
    RebillType,
    StatementLine,
)

BASE = "https://api.sandbox.freeagent.com"


class _FakeResp:
    def __init__(self, status_code: int = 200, payload: dict | None = None) -> None:
        self.status_code = status_code
        self.text = json.dumps(payload) if payload is not None else ""
        self.content = self.text.encode("utf-8")
        self.headers = {"Content-Type": "application/json"}


class _Recorder:
    """Stands in for `requests.request`, answering from a queue."""

    def __init__(self, *responses: _FakeResp) -> None:
        self.calls: list[dict] = []
        self._responses = list(responses)

    def __call__(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self._responses:
            return self._responses.pop(0)
        return _FakeResp(200, None)

    @property
    def last(self) -> dict:
        return self.calls[-1]

    def last_json(self) -> dict:
        return json.loads(self.last["data"])


@pytest.fixture
def http(monkeypatch):
    def _install(*responses: _FakeResp) -> _Recorder:
        recorder = _Recorder(*responses)
        monkeypatch.setattr("requests.request", recorder)
        return recorder

    return _install


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------

def test_invoice_list_filters_use_absolute_urls(http, make_client) -> None:
    rec = http(_FakeResp(200, {"invoices": [{"reference": "001", "total_value": "120.0"}]}))
    client = make_client()

    invoices = client.invoices.list(view="recent_open_or_overdue", contact="17", nested_invoice_items=True)

    assert rec.last["url"] == f"{BASE}/v2/invoices"
    assert rec.last["params"] == {
        "per_page": "100",
        "view": "recent_open_or_overdue",
        "contact": f"{BASE}/v2/contacts/17",
        "nested_invoice_items": "true",
    }
    assert invoices[0].total_value == Decimal("120.0")


def test_invoice_create_sends_documented_body(http, make_client) -> None:
    rec = http(_FakeResp(201, {"invoice": {"url": f"{BASE}/v2/invoices/55", "status": "Draft"}}))
    client = make_client()

    created = client.invoices.create(
        Invoice(
            contact=f"{BASE}/v2/contacts/17",
            dated_on=date(2024, 3, 1),
            payment_terms_in_days=14,
            invoice_items=[InvoiceItem(item_type="Days", quantity=Decimal("3"), price=Decimal("450.00"))],
        )
    )

    assert rec.last["method"] == "POST"
    assert rec.last["url"] == f"{BASE}/v2/invoices"
    assert rec.last_json() == {
        "invoice": {
            "contact": f"{BASE}/v2/contacts/17",
            "dated_on": "2024-03-01",
            "payment_terms_in_days": 14,
            "invoice_items": [{"item_type": "Days", "quantity": "3", "price": "450.00"}],
        }
    }
    assert created.resource_id == "55"


def test_invoice_get_update_delete_accept_url_or_id(http, make_client) -> None:
    rec = http(
        _FakeResp(200, {"invoice": {"reference": "A"}}),
        _FakeResp(200, {"invoice": {"reference": "B"}}),
        _FakeResp(200, None),
    )
    client = make_client()

    assert client.invoices.get("55").reference == "A"
    updated = client.invoices.update(f"{BASE}/v2/invoices/55", Invoice(reference="B"))
    client.invoices.delete(Invoice(url=f"{BASE}/v2/invoices/55"))

    assert [c["method"] for c in rec.calls] == ["GET", "PUT", "DELETE"]
    assert {c["url"] for c in rec.calls} == {f"{BASE}/v2/invoices/55"}
    assert updated.reference == "B"


def test_invoice_transitions_and_duplicate(http, make_client) -> None:
    rec = http(_FakeResp(200, None), _FakeResp(201, {"invoice": {"reference": "002"}}))
    client = make_client()

    client.invoices.mark_as_sent("55")
    dup = client.invoices.duplicate("55")

    assert rec.calls[0]["method"] == "PUT"
    assert rec.calls[0]["url"] == f"{BASE}/v2/invoices/55/transitions/mark_as_sent"
    assert rec.calls[1]["url"] == f"{BASE}/v2/invoices/55/duplicate"
    assert dup.reference == "002"


def test_invoice_send_email_and_pdf(http, make_client) -> None:
    pdf_bytes = b"%PDF-1.4 fake"
    rec = http(
        _FakeResp(200, None),
        _FakeResp(200, {"pdf": {"content": base64.b64encode(pdf_bytes).decode("ascii")}}),
    )
    client = make_client()

    client.invoices.send_email(
        "55",
        InvoiceEmail(to="billing@example.com", from_="me@example.com", subject="Invoice 001", body="Thanks"),
    )
    pdf = client.invoices.pdf("55")

    assert rec.calls[0]["url"] == f"{BASE}/v2/invoices/55/send_email"
    assert json.loads(rec.calls[0]["data"]) == {
        "invoice": {
            "email": {
                "to": "billing@example.com",
                "from": "me@example.com",
                "subject": "Invoice 001",
                "body": "Thanks",
            }
        }
    }
    assert rec.calls[1]["url"] == f"{BASE}/v2/invoices/55/pdf"
    assert pdf == pdf_bytes


def test_estimate_transitions(http, make_client) -> None:
    rec = http()
    client = make_client()

    client.estimates.mark_as_approved("8")
    client.estimates.convert_to_invoice("8")

    assert [c["url"] for c in rec.calls] == [
        f"{BASE}/v2/estimates/8/transitions/mark_as_approved",
        f"{BASE}/v2/estimates/8/transitions/convert_to_invoice",
    ]


def test_credit_note_transition(http, make_client) -> None:
    rec = http()
    make_client().credit_notes.mark_as_cancelled("3")

    assert rec.last["url"] == f"{BASE}/v2/credit_notes/3/transitions/mark_as_cancelled"


# ---------------------------------------------------------------------------
# Rules enforced before sending
# ---------------------------------------------------------------------------

def test_bill_with_markup_but_no_factor_is_rejected_before_sending(http, make_client) -> None:
    rec = http()
    client = make_client()

    with pytest.raises(ResourceValidationError) as excinfo:
        client.bills.create(Bill(contact="1", rebill_type=RebillType.MARKUP))

    assert rec.calls == []
    assert "rebill_factor" in str(excinfo.value)


def test_ec_goods_rejected_for_gb_company_after_2021(http, make_client) -> None:
    rec = http()
    client = make_client(company_country="GB")

    explanation = BankTransactionExplanation(
        bank_transaction="1",
        dated_on=date(2021, 1, 1),
        ec_status=EcStatus.EC_GOODS,
        gross_value=Decimal("-10.00"),
    )
    with pytest.raises(ResourceValidationError):
        client.bank_transaction_explanations.create(explanation)

    assert rec.calls == []


def test_ec_goods_allowed_when_country_not_configured(http, make_client) -> None:
    rec = http(_FakeResp(201, {"bank_transaction_explanation": {"ec_status": "EC Goods"}}))
    client = make_client()

    created = client.bank_transaction_explanations.create(
        BankTransactionExplanation(dated_on=date(2022, 5, 1), ec_status=EcStatus.EC_GOODS)
    )

    assert created.ec_status is EcStatus.EC_GOODS
    assert rec.last_json()["bank_transaction_explanation"]["ec_status"] == "EC Goods"


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

def test_categories_list_flattens_groups_and_tags_them(http, make_client) -> None:
    http(
        _FakeResp(
            200,
            {
                "admin_expenses_categories": [
                    {"url": f"{BASE}/v2/categories/285", "nominal_code": "285", "description": "Accommodation and Meals"}
                ],
                "income_categories": [{"nominal_code": "001", "description": "Sales"}],
                "general_categories": [{"nominal_code": "907", "description": "Capital Introduced"}],
            },
        )
    )
    client = make_client()

    categories = {c.nominal_code: c for c in client.categories.list()}

    assert categories["285"].category_group is CategoryGroup.ADMIN_EXPENSES
    assert categories["285"].resource_id == "285"
    assert categories["001"].category_group is CategoryGroup.INCOME
    assert categories["907"].category_group is None


def test_category_get_reads_group_keyed_root(http, make_client) -> None:
    rec = http(_FakeResp(200, {"cost_of_sales_categories": {"nominal_code": "101", "description": "Purchases"}}))

    category = make_client().categories.get_by_nominal_code("101")

    assert rec.last["url"] == f"{BASE}/v2/categories/101"
    assert category.description == "Purchases"
    assert category.category_group is CategoryGroup.COST_OF_SALES


def test_category_get_by_nominal_code_returns_none_on_404(http, make_client) -> None:
    http(_FakeResp(404, {"errors": {"error": {"message": "Not found"}}}))

    assert make_client().categories.get_by_nominal_code("999") is None


def test_category_create_checks_nominal_code_range(http, make_client) -> None:
    rec = http()

    with pytest.raises(ResourceValidationError) as excinfo:
        make_client().categories.create(
            Category(
                nominal_code="450",
                description="Travel",
                category_group=CategoryGroup.ADMIN_EXPENSES,
                tax_reporting_name="Travel",
                allowable_for_tax=True,
            )
        )

    assert rec.calls == []
    assert "200-399" in str(excinfo.value)


def test_category_update_sends_editable_fields_only(http, make_client) -> None:
    rec = http(_FakeResp(200, {"admin_expenses_categories": {"nominal_code": "285", "description": "Meals"}}))

    make_client().categories.update(
        "285",
        Category(nominal_code="285", description="Meals", category_group=CategoryGroup.ADMIN_EXPENSES,
                 tax_reporting_name="Meals", allowable_for_tax=False),
    )

    assert rec.last["method"] == "PUT"
    assert rec.last_json() == {
        "category": {"description": "Meals", "tax_reporting_name": "Meals", "allowable_for_tax": False}
    }


# ---------------------------------------------------------------------------
# Banking
# ---------------------------------------------------------------------------

def test_bank_transactions_list_requires_and_sends_bank_account(http, make_client) -> None:
    rec = http(_FakeResp(200, {"bank_transactions": [{"amount": "-12.50", "unexplained_amount": "0.0"}]}))

    txs = make_client().bank_transactions.list("9", from_date=date(2024, 1, 1), view="unexplained")

    assert rec.last["params"]["bank_account"] == f"{BASE}/v2/bank_accounts/9"
    assert rec.last["params"]["from_date"] == "2024-01-01"
    assert txs[0].amount == Decimal("-12.50")
    assert txs[0].is_explained is True


def test_upload_statement_is_multipart(http, make_client) -> None:
    rec = http(
        _FakeResp(
            200,
            {"bank_statement_upload": {"imported_transaction_count": 2, "duplicate_transaction_count": 1}},
        )
    )

    result = make_client().bank_transactions.upload_statement("9", b"Date,Amount\n", "CSV")

    assert rec.last["method"] == "POST"
    assert rec.last["url"] == f"{BASE}/v2/bank_transactions/statement"
    assert rec.last["params"] == {"bank_account": f"{BASE}/v2/bank_accounts/9"}
    assert rec.last["files"] == {"statement": ("statement.csv", b"Date,Amount\n")}
    assert rec.last["data"] is None
    assert "Content-Type" not in rec.last["headers"]
    assert result.imported_transaction_count == 2


def test_upload_statement_rejects_unknown_file_type(http, make_client) -> None:
    rec = http()

    with pytest.raises(ResourceValidationError):
        make_client().bank_transactions.upload_statement("9", b"data", "pdf")

    assert rec.calls == []


def test_upload_transactions_sends_statement_array(http, make_client) -> None:
    rec = http(_FakeResp(200, None))

    result = make_client().bank_transactions.upload_transactions(
        "9",
        [
            StatementLine(dated_on=date(2024, 2, 1), description="Coffee", amount=Decimal("-3.20")),
            {"dated_on": "2024-02-02", "description": "Refund", "amount": "10.00", "fitid": "abc"},
        ],
    )

    assert rec.last_json() == {
        "statement": [
            {"dated_on": "2024-02-01", "description": "Coffee", "amount": "-3.20"},
            {"dated_on": "2024-02-02", "description": "Refund", "amount": "10.00", "fitid": "abc"},
        ]
    }
    assert result.imported_transaction_count is None


# ---------------------------------------------------------------------------
# People, company, tax, payroll
# ---------------------------------------------------------------------------

def test_users_employees_and_directors(http, make_client) -> None:
    users_payload = {
        "users": [
            {"first_name": "Zoe", "last_name": "Young", "role": "Employee", "hidden": False},
            {"first_name": "Al", "last_name": "Adams", "role": "Employee", "hidden": False},
            {"first_name": "Hid", "last_name": "Den", "role": "Employee", "hidden": True},
            {"first_name": "Dee", "last_name": "Rector", "role": "Director", "hidden": False},
        ]
    }
    http(_FakeResp(200, users_payload), _FakeResp(200, users_payload))
    client = make_client()

    assert [u.last_name for u in client.users.employees()] == ["Adams", "Young"]
    assert [u.last_name for u in client.users.directors()] == ["Rector"]


def test_company_tax_timeline_and_business_categories(http, make_client) -> None:
    http(
        _FakeResp(200, {"timeline_items": [{"description": "VAT Return 09 11", "dated_on": "2011-11-07", "amount_due": "-1000.0"}]}),
        _FakeResp(200, {"business_categories": ["Accounting", "Software"]}),
    )
    client = make_client()

    (item,) = client.company.tax_timeline()
    assert item.dated_on == date(2011, 11, 7)
    assert item.amount_due == Decimal("-1000.0")
    assert client.company.business_categories() == ["Accounting", "Software"]


def test_vat_return_mark_as_filed(http, make_client) -> None:
    rec = http(_FakeResp(200, {"vat_return": {"status": "filed", "hmrc_reference": "H1"}}))

    result = make_client().vat_returns.mark_as_filed(
        date(2024, 3, 31), filed_on=date(2024, 4, 20), filed_online=True, hmrc_reference="H1"
    )

    assert rec.last["url"] == f"{BASE}/v2/vat_returns/2024-03-31/mark_as_filed"
    assert rec.last_json() == {
        "vat_return": {"filed_on": "2024-04-20", "filed_online": True, "hmrc_reference": "H1"}
    }
    assert result.status == "filed"


def test_vat_return_payment_mark_as_paid(http, make_client) -> None:
    rec = http()

    make_client().vat_returns.mark_payment_as_paid("2024-03-31", date(2024, 5, 7))

    assert rec.last["url"] == f"{BASE}/v2/vat_returns/2024-03-31/payments/2024-05-07/mark_as_paid"


def test_self_assessment_paths_use_user_id(http, make_client) -> None:
    rec = http(_FakeResp(200, {"self_assessment_returns": [{"period_ends_on": "2024-04-05"}]}), _FakeResp(200, None))
    client = make_client()

    returns = client.self_assessment_returns.list(f"{BASE}/v2/users/12")
    client.self_assessment_returns.mark_as_unfiled("12", date(2024, 4, 5))

    assert rec.calls[0]["url"] == f"{BASE}/v2/users/12/self_assessment_returns"
    assert rec.calls[1]["url"] == f"{BASE}/v2/users/12/self_assessment_returns/2024-04-05/mark_as_unfiled"
    assert returns[0].period_ends_on == date(2024, 4, 5)


def test_payroll_year_and_flattened_payslips(http, make_client) -> None:
    year_payload = {
        "periods": [
            {"period": 0, "dated_on": "2024-04-25", "status": "filed"},
            {"period": 1, "dated_on": "2024-05-25", "status": "filed"},
        ],
        "payments": [{"dated_on": "2024-05-22", "amount_due": "900.0", "status": "unpaid"}],
    }
    rec = http(
        _FakeResp(200, year_payload),
        _FakeResp(200, {"period": {"period": 0, "payslips": [
            {"user": f"{BASE}/v2/users/1", "gross_salary": "1000.0"},
            {"user": f"{BASE}/v2/users/2", "gross_salary": "2000.0"},
        ]}}),
        _FakeResp(200, {"period": {"period": 1, "payslips": [
            {"user": f"{BASE}/v2/users/1", "gross_salary": "1100.0"},
        ]}}),
    )

    slips = make_client().payslips.list(2025, user="1")

    assert [c["url"] for c in rec.calls] == [
        f"{BASE}/v2/payroll/2025",
        f"{BASE}/v2/payroll/2025/0",
        f"{BASE}/v2/payroll/2025/1",
    ]
    assert [s.gross_salary for s in slips] == [Decimal("1000.0"), Decimal("1100.0")]


def test_payroll_payment_mark_as_unpaid(http, make_client) -> None:
    rec = http()

    make_client().payroll.mark_payment_as_unpaid(2025, "2024-05-22")

    assert rec.last["method"] == "PUT"
    assert rec.last["url"] == f"{BASE}/v2/payroll/2025/payments/2024-05-22/mark_as_unpaid"


def test_cis_bands_and_capital_asset_types(http, make_client) -> None:
    http(
        _FakeResp(200, {"available_bands": [{"name": "cis_gross", "deduction_rate": "0.0", "nominal_code": "061"}]}),
        _FakeResp(200, {"capital_asset_types": [{"name": "Computer Equipment", "system_default": True}]}),
    )
    client = make_client()

    (band,) = client.cis_bands.list()
    (asset_type,) = client.capital_asset_types.list()

    assert band.deduction_rate == Decimal("0.0")
    assert asset_type.system_default is True


def test_notes_need_exactly_one_parent(http, make_client) -> None:
    rec = http(_FakeResp(201, {"note": {"note": "Call back Tuesday"}}))
    client = make_client()

    with pytest.raises(ValueError):
        client.notes.list()
    with pytest.raises(ValueError):
        client.notes.list(contact="1", project="2")

    note = client.notes.create("Call back Tuesday", contact="1")

    assert rec.last["params"] == {"contact": f"{BASE}/v2/contacts/1"}
    assert rec.last_json() == {"note": {"note": "Call back Tuesday"}}
    assert note.note == "Call back Tuesday"


def test_upload_statement_rejects_empty_content(http, make_client) -> None:
    rec = http()
    client = make_client()

    with pytest.raises(ResourceValidationError):
        client.bank_transactions.upload_statement("9", b"", "csv")
    with pytest.raises(ResourceValidationError):
        client.bank_transactions.upload_statement("9", "  \n", "csv")

    assert rec.calls == []


def test_upload_statement_reads_path_objects_but_not_strings(http, make_client, tmp_path, monkeypatch) -> None:
    rec = http(_FakeResp(200, None), _FakeResp(200, None))
    statement_file = tmp_path / "march.ofx"
    statement_file.write_bytes(b"<OFX>march</OFX>")
    monkeypatch.chdir(tmp_path)
    client = make_client()

    client.bank_transactions.upload_statement("9", statement_file, "ofx")
    client.bank_transactions.upload_statement("9", "march.ofx", "ofx")

    assert rec.calls[0]["files"] == {"statement": ("march.ofx", b"<OFX>march</OFX>")}
    assert rec.calls[1]["files"] == {"statement": ("statement.ofx", b"march.ofx")}


def test_bank_account_is_required_for_bank_listings(http, make_client) -> None:
    rec = http()
    client = make_client()

    with pytest.raises(ValueError, match="bank_account"):
        client.bank_transactions.list(None)
    with pytest.raises(ValueError, match="bank_account"):
        client.bank_transaction_explanations.list(None)
    with pytest.raises(ValueError, match="bank_account"):
        client.bank_transactions.upload_transactions(
            None, [StatementLine(dated_on=date(2024, 2, 1), amount=Decimal("1.00"))]
        )

    assert rec.calls == []


def test_payslips_filtered_by_date_range(http, make_client) -> None:
    rec = http(
        _FakeResp(200, {"periods": [
            {"period": 0, "dated_on": "2024-04-25"},
            {"period": 1, "dated_on": "2024-05-25"},
            {"period": 2, "dated_on": "2024-06-25"},
        ]}),
        _FakeResp(200, {"period": {"period": 1, "dated_on": "2024-05-25", "payslips": [
            {"user": f"{BASE}/v2/users/1", "gross_salary": "1100.0"},
        ]}}),
    )

    slips = make_client().payslips.list(2025, from_date=date(2024, 5, 1), to_date=date(2024, 5, 31))

    assert [c["url"] for c in rec.calls] == [f"{BASE}/v2/payroll/2025", f"{BASE}/v2/payroll/2025/1"]
    assert [s.gross_salary for s in slips] == [Decimal("1100.0")]

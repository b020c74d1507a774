from src.freeagent.models.accounting import (
    CapitalAssetType,
    Category,
    CisBand,
    Company,
    SalesTaxRate,
    TaxTimelineItem,
    User,
    UserPayrollProfile,
)
from src.freeagent.models.banking import (
    BankAccount,
    BankStatementUpload,
    BankTransaction,
    BankTransactionExplanation,
    StatementLine,
)
from src.freeagent.models.base import FreeAgentItem, FreeAgentModel, resource_id
from src.freeagent.models.enums import (
    AutoSalesTaxRate,
    CategoryGroup,
    EcStatus,
    RebillType,
    Role,
    SalesTaxStatus,
    StatementFileType,
)
from src.freeagent.models.payroll import PayrollPayment, PayrollPeriod, PayrollYear, Payslip
from src.freeagent.models.purchases import Attachment, Bill, BillItem, HirePurchase
from src.freeagent.models.sales import (
    Contact,
    CreditNote,
    CreditNoteItem,
    EmailAttachment,
    Estimate,
    EstimateItem,
    Invoice,
    InvoiceEmail,
    InvoiceItem,
    Note,
    Project,
)
from src.freeagent.models.tax import (
    ReturnFiling,
    ReturnPayment,
    SelfAssessmentPayment,
    SelfAssessmentReturn,
    VatReturn,
    VatReturnPayment,
)

__all__ = [
    "Attachment",
    "AutoSalesTaxRate",
    "BankAccount",
    "BankStatementUpload",
    "BankTransaction",
    "BankTransactionExplanation",
    "Bill",
    "BillItem",
    "CapitalAssetType",
    "Category",
    "CategoryGroup",
    "CisBand",
    "Company",
    "Contact",
    "CreditNote",
    "CreditNoteItem",
    "EcStatus",
    "EmailAttachment",
    "Estimate",
    "EstimateItem",
    "FreeAgentItem",
    "FreeAgentModel",
    "HirePurchase",
    "Invoice",
    "InvoiceEmail",
    "InvoiceItem",
    "Note",
    "PayrollPayment",
    "PayrollPeriod",
    "PayrollYear",
    "Payslip",
    "Project",
    "RebillType",
    "ReturnFiling",
    "ReturnPayment",
    "Role",
    "SalesTaxRate",
    "SalesTaxStatus",
    "SelfAssessmentPayment",
    "SelfAssessmentReturn",
    "StatementFileType",
    "StatementLine",
    "TaxTimelineItem",
    "User",
    "UserPayrollProfile",
    "VatReturn",
    "VatReturnPayment",
    "resource_id",
]

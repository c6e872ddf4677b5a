"""Pydantic models for the two analysis result variants."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import AllowInfNan, BaseModel, Field, Strict, StrictInt


# Amounts are never coerced: ints stay ints, strings and bools are rejected.
Amount = Union[StrictInt, Annotated[float, Strict(), AllowInfNan(False)]]


class DocumentKind(str, Enum):
    STATEMENT = "statement"
    PAYSLIP = "payslip"


class Transaction(BaseModel):
    date: str
    description: str
    amount: Amount
    type: Literal["income", "expense"]
    category: str


class StatementSummary(BaseModel):
    bankName: str
    accountHolder: str
    period: str
    totalIncome: Amount
    totalExpense: Amount
    netBalance: Amount
    currency: str


class StatementResult(BaseModel):
    kind: Literal["statement"] = "statement"
    summary: StatementSummary
    transactions: list[Transaction]
    insights: list[str]


class Deduction(BaseModel):
    description: str
    amount: Amount
    type: Literal["tax", "insurance", "pension", "other"]


class PayslipSummary(BaseModel):
    employerName: str
    employeeName: str
    payPeriod: str
    grossPay: Amount
    netPay: Amount
    totalDeductions: Amount
    currency: str


class PayslipResult(BaseModel):
    kind: Literal["payslip"] = "payslip"
    summary: PayslipSummary
    deductions: list[Deduction]
    insights: list[str]


AnalysisResult = Annotated[
    Union[StatementResult, PayslipResult],
    Field(discriminator="kind"),
]


class ErrorResponse(BaseModel):
    error: str
    message: str
    document_kind: str | None = None
    retryable: bool = False

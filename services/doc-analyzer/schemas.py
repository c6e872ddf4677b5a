"""Response schemas sent to Gemini to constrain the model output.

Schemas use the OpenAPI subset accepted by ``generationConfig.responseSchema``
(``type``, ``properties``, ``items``, ``required``, ``description``). They are
frozen at import time: nested mappings are read-only proxies and ``required``
lists are tuples. Use ``to_jsonable`` to get a plain copy for a request body.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from models import DocumentKind

STRING = "STRING"
NUMBER = "NUMBER"
OBJECT = "OBJECT"
ARRAY = "ARRAY"


def _freeze(node: Any) -> Any:
    if isinstance(node, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in node.items()})
    if isinstance(node, (list, tuple)):
        return tuple(_freeze(v) for v in node)
    return node


def to_jsonable(node: Any) -> Any:
    """Return a mutable, JSON-serializable deep copy of a frozen schema."""
    if isinstance(node, Mapping):
        return {k: to_jsonable(v) for k, v in node.items()}
    if isinstance(node, tuple):
        return [to_jsonable(v) for v in node]
    return node


STATEMENT_SCHEMA = _freeze({
    "type": OBJECT,
    "properties": {
        "summary": {
            "type": OBJECT,
            "properties": {
                "bankName": {"type": STRING},
                "accountHolder": {"type": STRING},
                "period": {"type": STRING},
                "totalIncome": {"type": NUMBER},
                "totalExpense": {"type": NUMBER},
                "netBalance": {"type": NUMBER},
                "currency": {"type": STRING},
            },
            "required": [
                "bankName", "accountHolder", "period",
                "totalIncome", "totalExpense", "netBalance", "currency",
            ],
        },
        "transactions": {
            "type": ARRAY,
            "items": {
                "type": OBJECT,
                "properties": {
                    "date": {"type": STRING, "description": "YYYY-MM-DD"},
                    "description": {"type": STRING},
                    "amount": {"type": NUMBER},
                    "type": {"type": STRING, "description": "income or expense"},
                    "category": {
                        "type": STRING,
                        "description": "e.g., Food, Rent, Salary, etc.",
                    },
                },
                "required": ["date", "description", "amount", "type", "category"],
            },
        },
        "insights": {
            "type": ARRAY,
            "items": {"type": STRING},
        },
    },
    "required": ["summary", "transactions", "insights"],
})

PAYSLIP_SCHEMA = _freeze({
    "type": OBJECT,
    "properties": {
        "summary": {
            "type": OBJECT,
            "properties": {
                "employerName": {"type": STRING},
                "employeeName": {"type": STRING},
                "payPeriod": {"type": STRING},
                "grossPay": {"type": NUMBER},
                "netPay": {"type": NUMBER},
                "totalDeductions": {"type": NUMBER},
                "currency": {"type": STRING},
            },
            "required": [
                "employerName", "employeeName", "payPeriod",
                "grossPay", "netPay", "totalDeductions", "currency",
            ],
        },
        "deductions": {
            "type": ARRAY,
            "items": {
                "type": OBJECT,
                "properties": {
                    "description": {"type": STRING},
                    "amount": {"type": NUMBER},
                    "type": {
                        "type": STRING,
                        "description": "tax | insurance | pension | other",
                    },
                },
                "required": ["description", "amount", "type"],
            },
        },
        "insights": {
            "type": ARRAY,
            "items": {"type": STRING},
        },
    },
    "required": ["summary", "deductions", "insights"],
})

SCHEMAS: Mapping[DocumentKind, Mapping[str, Any]] = MappingProxyType({
    DocumentKind.STATEMENT: STATEMENT_SCHEMA,
    DocumentKind.PAYSLIP: PAYSLIP_SCHEMA,
})


def schema_for(kind: DocumentKind) -> Mapping[str, Any]:
    return SCHEMAS[DocumentKind(kind)]


def required_fields(kind: DocumentKind) -> tuple[str, ...]:
    return schema_for(kind)["required"]

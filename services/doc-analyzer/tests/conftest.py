"""Shared test fixtures for document analyzer tests."""

import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import settings  # noqa: E402


@pytest.fixture
def api_key(monkeypatch) -> str:
    """Configure a fake Gemini key for the duration of a test."""
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """Minimal PDF header, enough for a pass-through upload."""
    return b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF"


@pytest.fixture
def statement_payload() -> dict:
    return {
        "summary": {
            "bankName": "Nordbank",
            "accountHolder": "Max Mustermann",
            "period": "2024-03-01 to 2024-03-31",
            "totalIncome": 5000,
            "totalExpense": 3200,
            "netBalance": 1800,
            "currency": "EUR",
        },
        "transactions": [
            {
                "date": "2024-03-01",
                "description": "Salary ACME GmbH",
                "amount": 5000,
                "type": "income",
                "category": "Salary",
            },
            {
                "date": "2024-03-03",
                "description": "Rent March",
                "amount": -3200,
                "type": "expense",
                "category": "Rent",
            },
        ],
        "insights": ["Rent is 64% of income.", "Savings rate is 36%."],
    }


@pytest.fixture
def payslip_payload() -> dict:
    return {
        "summary": {
            "employerName": "ACME GmbH",
            "employeeName": "Anna Schmidt",
            "payPeriod": "March 2024",
            "grossPay": 4000,
            "netPay": 3100,
            "totalDeductions": 900,
            "currency": "EUR",
        },
        "deductions": [
            {"description": "Income tax", "amount": -500, "type": "tax"},
            {"description": "Health insurance", "amount": 250, "type": "insurance"},
            {"description": "Pension fund", "amount": -150, "type": "pension"},
        ],
        "insights": ["Deductions are 22.5% of gross pay."],
    }


@pytest.fixture
def statement_response(statement_payload: dict) -> str:
    """Mock Gemini text for a bank statement."""
    return json.dumps(statement_payload)


@pytest.fixture
def payslip_response(payslip_payload: dict) -> str:
    """Mock Gemini text for a payslip."""
    return json.dumps(payslip_payload)

"""Tests for the response schema registry."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from models import DocumentKind, PayslipSummary, StatementSummary
from schemas import ARRAY, NUMBER, OBJECT, STRING, required_fields, schema_for, to_jsonable

ALLOWED_TYPES = {STRING, NUMBER, OBJECT, ARRAY}


def _walk(node):
    yield node
    for child in node.get("properties", {}).values():
        yield from _walk(child)
    if "items" in node:
        yield from _walk(node["items"])


class TestRegistry:
    def test_lookup_by_kind(self):
        assert required_fields(DocumentKind.STATEMENT) == ("summary", "transactions", "insights")
        assert required_fields(DocumentKind.PAYSLIP) == ("summary", "deductions", "insights")

    def test_lookup_by_value(self):
        assert schema_for("payslip") is schema_for(DocumentKind.PAYSLIP)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            schema_for("invoice")

    @pytest.mark.parametrize("kind", list(DocumentKind))
    def test_types_restricted(self, kind):
        for node in _walk(schema_for(kind)):
            assert node["type"] in ALLOWED_TYPES

    @pytest.mark.parametrize("kind", list(DocumentKind))
    def test_every_object_lists_all_properties_as_required(self, kind):
        for node in _walk(schema_for(kind)):
            if node["type"] == OBJECT:
                assert set(node["required"]) == set(node["properties"])

    def test_summary_fields_match_models(self):
        statement = schema_for(DocumentKind.STATEMENT)["properties"]["summary"]
        payslip = schema_for(DocumentKind.PAYSLIP)["properties"]["summary"]
        assert set(statement["required"]) == set(StatementSummary.model_fields)
        assert set(payslip["required"]) == set(PayslipSummary.model_fields)


class TestImmutability:
    def test_schema_cannot_be_modified(self):
        schema = schema_for(DocumentKind.STATEMENT)
        with pytest.raises(TypeError):
            schema["type"] = STRING
        with pytest.raises(TypeError):
            schema["properties"]["summary"]["properties"]["bankName"] = {"type": NUMBER}

    def test_jsonable_copy_is_independent(self):
        copy = to_jsonable(schema_for(DocumentKind.PAYSLIP))
        copy["required"].append("extra")
        assert "extra" not in required_fields(DocumentKind.PAYSLIP)
        assert isinstance(copy["properties"]["deductions"]["items"]["required"], list)

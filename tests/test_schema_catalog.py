"""
Unit tests for tablecore.schema.SchemaCatalog.
"""
import json

import pytest
import yaml

from tablecore.errors import SchemaLoadError
from tablecore.schema import SchemaCatalog


class TestTables:
    def test_table_names_in_declaration_order(self, catalog):
        assert catalog.table_names() == ["orders", "parameters", "notes", "audit"]

    def test_table_type(self, catalog):
        assert catalog.get_table_type("orders") == "array"
        assert catalog.get_table_type("parameters") == "object"
        assert catalog.get_table_type("unknown") == "array"

    def test_table_visible_defaults_to_true(self, catalog):
        assert catalog.get_table_visible("orders")
        assert not catalog.get_table_visible("audit")
        assert catalog.get_table_visible("unknown")

    def test_table_title_and_description(self, catalog):
        assert catalog.get_table_title("orders") == "Orders"
        assert catalog.get_table_title("orders", "fr") == "Commandes"
        assert catalog.get_table_title("orders", "de") == "Orders"
        assert catalog.get_table_title("notes") == "notes"
        assert catalog.get_table_description("orders") == "Customer orders"
        assert catalog.get_table_description("parameters") == "Run parameters"
        assert catalog.get_table_description("notes") == ""


class TestFields:
    def test_required_fields_come_first(self, catalog):
        assert catalog.get_field_names("orders") == ["id", "customer", "amount", "placed", "internal"]
        assert catalog.get_required_fields("orders") == ["id"]

    def test_object_table_fields(self, catalog):
        assert catalog.get_field_names("parameters") == ["horizon", "label"]
        assert catalog.get_required_fields("parameters") == ["horizon"]

    def test_unknown_table_has_no_fields(self, catalog):
        assert catalog.get_field_names("unknown") == []
        assert catalog.get_required_fields("unknown") == []

    def test_field_type_takes_first_of_list(self, catalog):
        assert catalog.get_field_type("orders", "amount") == "number"
        assert catalog.get_field_type("orders", "id") == "integer"
        assert catalog.get_field_type("orders", "missing") is None

    def test_field_visibility(self, catalog):
        assert catalog.get_field_visible("orders", "customer")
        assert not catalog.get_field_visible("orders", "internal")

    def test_field_title_locale_fallback(self, catalog):
        assert catalog.get_field_title("orders", "customer", "fr") == "Client"
        assert catalog.get_field_title("orders", "amount", "fr") == "Amount"
        assert catalog.get_field_title("orders", "id") == "ID"
        assert catalog.get_field_title("orders", "internal") == "internal"

    def test_filterable_and_sortable_defaults(self, catalog):
        assert catalog.get_field_filterable("orders", "customer")
        assert not catalog.get_field_filterable("orders", "amount")
        assert catalog.get_field_sortable("orders", "amount")

    def test_describe_fields(self, catalog):
        assert catalog.describe_fields("parameters") == [
            {"table": "parameters", "column": "horizon", "type": "number"},
            {"table": "parameters", "column": "label", "type": "string"},
        ]


class TestFromFile:
    def test_json(self, tmp_path, schema_dict):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(schema_dict), encoding="utf-8")
        assert SchemaCatalog.from_file(path).table_names() == ["orders", "parameters", "notes", "audit"]

    def test_yaml(self, tmp_path, schema_dict):
        path = tmp_path / "schema.yaml"
        path.write_text(yaml.safe_dump(schema_dict), encoding="utf-8")
        assert SchemaCatalog.from_file(str(path)).get_table_type("parameters") == "object"

    def test_missing_file(self, tmp_path):
        with pytest.raises(SchemaLoadError):
            SchemaCatalog.from_file(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SchemaLoadError):
            SchemaCatalog.from_file(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(SchemaLoadError):
            SchemaCatalog.from_file(path)

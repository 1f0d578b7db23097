"""
Pytest configuration and shared fixtures.
"""
import os
import sys
import pytest

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from tablecore.schema import SchemaCatalog


@pytest.fixture
def people():
    """Small, mixed-shape record set used by the filter tests."""
    return [
        {"id": 1, "name": "John Smith", "age": 25, "active": True, "joined": "2023-01-15",
         "address": {"city": "Boston", "tags": ["vip", "north"]}},
        {"id": 2, "name": "Jane Doe", "age": 30, "active": False, "joined": "2023-03-02T14:30:00",
         "address": {"city": "Johnstown", "tags": []}},
        {"id": 3, "name": "Bob Stone", "age": 35, "active": None, "joined": "not a date",
         "address": {"city": "Denver", "tags": ["john"]}},
        {"id": 4, "name": "Alice Long", "age": "n/a", "active": True, "joined": None,
         "address": None},
    ]


@pytest.fixture
def schema_dict():
    """Instance schema with one array table, one object table and one hidden table."""
    return {
        "properties": {
            "orders": {
                "type": "array",
                "title": {"en": "Orders", "fr": "Commandes"},
                "description": {"en": "Customer orders"},
                "items": {
                    "required": ["id"],
                    "properties": {
                        "customer": {"type": "string", "title": {"en": "Customer", "fr": "Client"},
                                     "filterable": True},
                        "id": {"type": "integer", "title": "ID"},
                        "amount": {"type": ["number", "null"], "title": {"en": "Amount"}},
                        "placed": {"type": "date", "title": {"en": "Placed"}},
                        "internal": {"type": "string", "visible": False},
                    },
                },
            },
            "parameters": {
                "type": "object",
                "description": "Run parameters",
                "required": ["horizon"],
                "properties": {
                    "horizon": {"type": "number", "title": {"en": "Horizon"}},
                    "label": {"type": "string", "title": {"en": "Label"}},
                },
            },
            "notes": {
                "type": "array",
                "items": {"properties": {"text": {"type": "string"}}},
            },
            "audit": {
                "type": "array",
                "visible": False,
                "items": {"properties": {"event": {"type": "string"}}},
            },
        }
    }


@pytest.fixture
def catalog(schema_dict):
    return SchemaCatalog(schema_dict, default_locale="en")


@pytest.fixture
def sample_date_strings():
    """Sample date strings in various formats for testing."""
    return {
        # ISO formats
        "iso_date": "2023-01-01",
        "iso_datetime": "2023-01-15T10:30:00",
        "iso_with_tz": "2023-01-15T10:30:00Z",

        # Slash formats
        "slash_ymd": "2023/01/15",
        "slash_dmy": "15/01/2023",

        # Dot format
        "dot_ymd": "2023.01.15",

        # Compact format
        "compact": "20230115",

        # Invalid
        "invalid": "not_a_date",
        "invalid_partial": "2023-13-45",
    }

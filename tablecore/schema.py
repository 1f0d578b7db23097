"""
SchemaCatalog: read-only view over a JSON-schema style table description.

The catalog answers the questions the importer, exporter and filter options
need (table type, field order, field types, visibility, display titles) and
nothing more; it does not validate data against the schema.

Expected shape::

    {
      "properties": {
        "orders": {                      # "array" table -> one row per record
          "type": "array",
          "title": {"en": "Orders", "fr": "Commandes"},
          "items": {
            "required": ["id"],
            "properties": {
              "id": {"type": "integer"},
              "placed": {"type": "date", "visible": false}
            }
          }
        },
        "parameters": {                  # "object" table -> one row per property
          "type": "object",
          "required": ["horizon"],
          "properties": {"horizon": {"type": "number", "title": "Horizon"}}
        }
      }
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from tablecore.config import get_settings
from tablecore.errors import SchemaLoadError
from tablecore.logger import get_logger

logger = get_logger(__name__)

TABLE_TYPE_ARRAY = "array"
TABLE_TYPE_OBJECT = "object"


def _first_type(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _localized(title: Any, locale: str, default_locale: str, fallback: str) -> str:
    if isinstance(title, str):
        return title
    if isinstance(title, Mapping):
        return title.get(locale) or title.get(default_locale) or fallback
    return fallback


class SchemaCatalog:
    """Metadata lookups over one collection schema (instance or solution)."""

    def __init__(self, schema: Optional[Mapping[str, Any]] = None, default_locale: Optional[str] = None):
        self._schema: Mapping[str, Any] = schema or {}
        self.default_locale = default_locale or get_settings().DEFAULT_LOCALE

    @classmethod
    def from_file(cls, path: Union[str, Path], default_locale: Optional[str] = None) -> "SchemaCatalog":
        """Load a catalog from a ``.json`` or ``.yaml``/``.yml`` file."""
        p = Path(path).expanduser()
        try:
            text = p.read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaLoadError(f"Cannot read schema file {p}: {e}") from e
        try:
            if p.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(text)
            else:
                data = json.loads(text)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise SchemaLoadError(f"Cannot parse schema file {p}: {e}") from e
        if not isinstance(data, Mapping):
            raise SchemaLoadError(f"Schema file {p} must contain a mapping, got {type(data).__name__}")
        logger.debug("Loaded schema %s (%d tables)", p, len(data.get("properties") or {}))
        return cls(data, default_locale=default_locale)

    @property
    def raw(self) -> Mapping[str, Any]:
        return self._schema

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def table_names(self) -> List[str]:
        return list((self._schema.get("properties") or {}).keys())

    def has_table(self, table: str) -> bool:
        return table in (self._schema.get("properties") or {})

    def _table(self, table: str) -> Mapping[str, Any]:
        tables = self._schema.get("properties") or {}
        spec = tables.get(table)
        return spec if isinstance(spec, Mapping) else {}

    def get_table_type(self, table: str) -> str:
        """``"object"`` for key/value tables, ``"array"`` for everything else."""
        declared = _first_type(self._table(table).get("type"))
        return TABLE_TYPE_OBJECT if declared == TABLE_TYPE_OBJECT else TABLE_TYPE_ARRAY

    def get_table_visible(self, table: str) -> bool:
        visible = self._table(table).get("visible")
        return True if visible is None else bool(visible)

    def get_table_title(self, table: str, locale: Optional[str] = None) -> str:
        return _localized(self._table(table).get("title"), locale or self.default_locale, self.default_locale, table)

    def get_table_description(self, table: str, locale: Optional[str] = None) -> str:
        return _localized(
            self._table(table).get("description"), locale or self.default_locale, self.default_locale, ""
        )

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def _field_container(self, table: str) -> Mapping[str, Any]:
        spec = self._table(table)
        if self.get_table_type(table) == TABLE_TYPE_OBJECT:
            return spec
        items = spec.get("items")
        return items if isinstance(items, Mapping) else {}

    def _field_properties(self, table: str) -> Mapping[str, Any]:
        props = self._field_container(table).get("properties")
        return props if isinstance(props, Mapping) else {}

    def _field(self, table: str, field: str) -> Mapping[str, Any]:
        spec = self._field_properties(table).get(field)
        return spec if isinstance(spec, Mapping) else {}

    def get_required_fields(self, table: str) -> List[str]:
        required = self._field_container(table).get("required") or []
        return [name for name in dict.fromkeys(required) if isinstance(name, str)]

    def get_field_names(self, table: str) -> List[str]:
        """Required fields first, then the remaining declared properties."""
        names = self.get_required_fields(table)
        seen = set(names)
        for name in self._field_properties(table):
            if name not in seen:
                names.append(name)
                seen.add(name)
        return names

    def has_field(self, table: str, field: str) -> bool:
        return field in self._field_properties(table) or field in self.get_required_fields(table)

    def get_field_type(self, table: str, field: str) -> Optional[str]:
        return _first_type(self._field(table, field).get("type"))

    def get_field_visible(self, table: str, field: str) -> bool:
        visible = self._field(table, field).get("visible")
        return True if visible is None else bool(visible)

    def get_field_sortable(self, table: str, field: str) -> bool:
        sortable = self._field(table, field).get("sortable")
        if sortable is None:
            sortable = self._table(table).get("sortable")
        return True if sortable is None else bool(sortable)

    def get_field_filterable(self, table: str, field: str) -> bool:
        filterable = self._field(table, field).get("filterable")
        if filterable is None:
            filterable = self._table(table).get("filterable")
        return False if filterable is None else bool(filterable)

    def get_field_title(self, table: str, field: str, locale: Optional[str] = None) -> str:
        """Title in ``locale``, else in the default locale, else the field name."""
        return _localized(self._field(table, field).get("title"), locale or self.default_locale, self.default_locale, field)

    def describe_fields(self, table: str) -> List[Dict[str, Any]]:
        """``[{table, column, type}, ...]`` rows for the ``_TYPES`` documentation sheet."""
        return [
            {"table": table, "column": name, "type": self.get_field_type(table, name)}
            for name in self._field_properties(table)
        ]

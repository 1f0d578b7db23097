"""
tablecore: schema-driven record filtering and spreadsheet import/export.

Subpackages:
  - tablecore.filters   (query search, filter descriptors, filter options)
  - tablecore.sheets    (column codec, workbook reader, importer, exporter)
"""

__version__ = "0.1.0"

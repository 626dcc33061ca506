"""Test fixtures package."""

from .fake_catalog import FakeCatalog, column_row, element_row, fk_row, relationship_row

__all__ = [
    "FakeCatalog",
    "column_row",
    "element_row",
    "fk_row",
    "relationship_row",
]

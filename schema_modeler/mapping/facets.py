"""Precision, scale and length facets pulled out of raw catalog rows."""

import re
from dataclasses import dataclass
from typing import Any, Optional

from schema_modeler.catalog.rows import RawColumn

_DECIMAL_DEFINITION = re.compile(r"^(?:numeric|decimal)\s*\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\)", re.I)
_LENGTH_DEFINITION = re.compile(
    r"^(?:character varying|varchar|character|char|bpchar|bit varying|varbit|bit)\s*\(\s*(\d+)\s*\)", re.I
)


@dataclass(frozen=True)
class NumericFacets:
    precision: Optional[int] = None
    scale: Optional[int] = None
    length: Optional[int] = None


def to_number(value: Any) -> Optional[int]:
    """Textual or numeric catalog field -> int, anything unparseable -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        try:
            return int(float(str(value).strip()))
        except ValueError:
            return None


class NumericFacetExtractor:
    """Pure transform from raw column fields to numeric facets."""

    def facets(self, raw: Optional[RawColumn]) -> NumericFacets:
        """Facets from the catalog fields, falling back to the type modifiers."""
        if raw is None:
            return NumericFacets()

        precision = to_number(raw.numeric_precision)
        scale = to_number(raw.numeric_scale)
        length = to_number(raw.character_maximum_length)

        if precision is None and scale is None:
            parsed = self.parse_decimal_definition(raw.data_type)
            if parsed is not None:
                precision, scale = parsed
        if length is None:
            length = self.parse_length_definition(raw.data_type)

        return NumericFacets(precision=precision, scale=scale, length=length)

    @staticmethod
    def parse_decimal_definition(type_definition: Optional[str]):
        """``numeric(10,2)`` -> ``(10, 2)``; ``numeric(10)`` -> ``(10, None)``."""
        match = _DECIMAL_DEFINITION.match((type_definition or "").strip())
        if not match:
            return None
        return to_number(match.group(1)), to_number(match.group(2))

    @staticmethod
    def parse_length_definition(type_definition: Optional[str]) -> Optional[int]:
        match = _LENGTH_DEFINITION.match((type_definition or "").strip())
        return to_number(match.group(1)) if match else None

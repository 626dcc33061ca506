"""Structured-type synthesis: JSON sample payload -> named interface types."""

import json
import logging
import re
from typing import Any, Dict, Optional, Set

from schema_modeler.catalog.models import StructuredField, StructuredType, StructuredTypeDefinition

logger = logging.getLogger(__name__)

GENERIC_TYPE = "any"

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_NON_IDENTIFIER_CHARS = re.compile(r"[^a-zA-Z0-9_$]")


def _type_name_for_key(key: str) -> str:
    sanitized = _NON_IDENTIFIER_CHARS.sub("", key)
    return sanitized[:1].upper() + sanitized[1:]


def _field_name(key: str) -> str:
    return key if _IDENTIFIER.match(key) else json.dumps(key)


def open_definition(name: str, is_array: bool = False) -> StructuredTypeDefinition:
    """The ``{[key: string]: unknown}`` shape used when nothing is known."""
    return StructuredTypeDefinition(
        name=name,
        types=(StructuredType(name=name, is_open=True),),
        is_array=is_array,
    )


class StructuredTypeSynthesizer:
    """Builds a minimal structural type from one sample value.

    Nested objects become named sub-types (reused by name), arrays take the
    type of their first element, and reference cycles are broken with the
    generic type.
    """

    def synthesize(self, sample: Any, root_name: str) -> StructuredTypeDefinition:
        is_array = isinstance(sample, list)
        if is_array:
            sample = sample[0] if sample else None

        if not isinstance(sample, dict) or not sample:
            return open_definition(root_name, is_array=is_array)

        generated: Dict[str, StructuredType] = {}
        self._generate(sample, root_name, generated, set(), root_name)
        return StructuredTypeDefinition(
            name=root_name,
            types=tuple(generated.values()),
            is_array=is_array,
        )

    def synthesize_text(self, payload: Optional[str], root_name: str) -> StructuredTypeDefinition:
        """Same as synthesize, from JSON text; unparseable text gives the open shape."""
        if payload is None or not str(payload).strip():
            return open_definition(root_name)
        try:
            sample = json.loads(payload)
        except (TypeError, ValueError) as e:
            logger.debug("Sample for %s is not valid JSON (%s); using open shape", root_name, e)
            return open_definition(root_name)
        return self.synthesize(sample, root_name)

    def _generate(
        self, obj: Dict[str, Any], name: str, generated: Dict[str, StructuredType], active: Set[int], root: str,
    ):
        if name in generated:
            return

        active.add(id(obj))
        fields = []
        for key, value in obj.items():
            key = str(key)
            type_ = self._type_of(value, _type_name_for_key(key) or f"{name}Item", generated, active, root)
            fields.append(StructuredField(name=_field_name(key), type=type_))
        active.discard(id(obj))

        # Children were generated during the loop, so dependencies come first
        if name not in generated:
            generated[name] = StructuredType(name=name, fields=tuple(fields))

    def _type_of(
        self, value: Any, parent_key: str, generated: Dict[str, StructuredType], active: Set[int], root: str,
    ) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, (int, float)):
            return "number"
        if isinstance(value, str):
            return "string"
        if isinstance(value, (list, tuple)):
            if not value:
                return f"{GENERIC_TYPE}[]"
            if id(value) in active:
                return GENERIC_TYPE
            active.add(id(value))
            element = self._type_of(value[0], parent_key, generated, active, root)
            active.discard(id(value))
            return f"{element}[]"
        if isinstance(value, dict):
            if id(value) in active:
                return GENERIC_TYPE
            # The root name is reserved for the outermost type
            name = f"{parent_key}Value" if parent_key == root else parent_key
            self._generate(value, name, generated, active, root)
            return name
        return GENERIC_TYPE

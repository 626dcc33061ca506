"""Column default expressions: value recovery and flag detection."""

import re
from typing import Any, Optional

SERIAL_DEFAULT = re.compile(r"^nextval\('.+_seq'::regclass\)")
DATE_TYPE = re.compile(r"^(datetime|timestamp)", re.I)
NOW_DEFAULT = re.compile(r"^(CURRENT_|now\(\)|LOCALTIMESTAMP|transaction_timestamp\(\)|statement_timestamp\(\))", re.I)

_QUOTED_CAST = re.compile(r"^'((?:[^']|'')*)'((?:::[\w\s\".\[\]]+)*)$", re.S)
_NUMBER = re.compile(r"^\(?(-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\)?(?:::[\w\s]+)?$")
_EMPTY_ARRAY = re.compile(r"^ARRAY\[\s*\](?:::[\w\s\[\]]+)?$", re.I)
_NULL = re.compile(r"^NULL(?:::[\w\s\[\]]+)?$", re.I)
_BOOLEAN = re.compile(r"^(true|false)(?:::boolean)?$", re.I)


def is_auto_increment(column_default: Optional[str], is_identity: bool = False) -> bool:
    """Sequence-backed (``nextval('..._seq'::regclass)``) or identity column."""
    return is_identity or bool(SERIAL_DEFAULT.match(column_default or ""))


def is_default_now(type_name: Optional[str], column_default: Optional[str]) -> bool:
    """Timestamp-like column whose default is the current time."""
    return bool(DATE_TYPE.match(type_name or "")) and bool(NOW_DEFAULT.match((column_default or "").strip()))


def parse_default(column_default: Optional[str]) -> Any:
    """Recover a literal value from a catalog default expression.

    Sequence and current-time defaults give None because they are reported
    as flags. Expressions that are not literals are returned unchanged.
    """
    if column_default is None:
        return None
    text = str(column_default).strip()
    if not text or SERIAL_DEFAULT.match(text) or NOW_DEFAULT.match(text) or _NULL.match(text):
        return None

    quoted = _QUOTED_CAST.match(text)
    if quoted:
        value = quoted.group(1).replace("''", "'")
        cast = quoted.group(2).strip()
        if cast.endswith("[]") and value.strip() == "{}":
            return []
        return value

    if _EMPTY_ARRAY.match(text):
        return []

    boolean = _BOOLEAN.match(text)
    if boolean:
        return boolean.group(1).lower() == "true"

    number = _NUMBER.match(text)
    if number:
        literal = number.group(1)
        if re.fullmatch(r"-?\d+", literal):
            return int(literal)
        return float(literal)

    return text

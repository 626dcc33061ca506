"""Identifier helpers: case conversion and English inflection for table names."""

import re
from typing import List

import inflection

# Words are lower runs, Capitalized runs, ACRONYM runs and digit runs
_WORD_PATTERN = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")

_ID_SUFFIX = re.compile(r"(?:_[iI][dD]|Id|ID)$")

UNCOUNTABLE_WORDS = frozenset({
    "data", "metadata", "information", "equipment", "news", "series",
    "species", "sheep", "fish", "deer", "media", "feedback", "staff",
})

# Nouns ending in "ie"; the "-ies" -> "-y" rule would mangle them
IE_NOUNS = frozenset({
    "cookie", "movie", "pie", "tie", "lie", "calorie", "rookie", "goalie",
    "prairie", "brownie", "hoodie", "selfie", "smoothie", "freebie", "zombie",
    "genie", "sortie", "auntie", "birdie", "budgie",
})


def split_words(name: str) -> List[str]:
    """Split snake_case, kebab-case, camelCase or PascalCase into words."""
    return _WORD_PATTERN.findall(name or "")


def camel_case(name: str) -> str:
    """Convert to camelCase (``user_id`` -> ``userId``)."""
    words = split_words(name)
    if not words:
        return ""
    first, rest = words[0], words[1:]
    return first.lower() + "".join(w[:1].upper() + w[1:].lower() for w in rest)


def pascal_case(name: str) -> str:
    """Convert to PascalCase (``user_roles`` -> ``UserRoles``)."""
    return "".join(w[:1].upper() + w[1:].lower() for w in split_words(name))


def _trailing_word(word: str) -> str:
    words = split_words(word)
    return words[-1].lower() if words else word.lower()


def singularize(word: str) -> str:
    """Singular form of a (possibly compound) English word."""
    if not word:
        return word
    tail = _trailing_word(word)
    if tail in UNCOUNTABLE_WORDS:
        return word
    if tail.endswith("ies") and tail[:-1] in IE_NOUNS:
        return word[:-1]
    return inflection.singularize(word)


def pluralize(word: str) -> str:
    """Plural form of a word; words that are already plural are returned as-is."""
    if not word:
        return word
    if _trailing_word(word) in UNCOUNTABLE_WORDS or singularize(word) != word:
        return word
    return inflection.pluralize(word)


def omit_id_suffix(name: str, capitalize: bool = False) -> str:
    """Drop a trailing id marker: ``userId`` -> ``user``, ``id`` -> ``''``."""
    stripped = "" if name.lower() == "id" else _ID_SUFFIX.sub("", name)
    stripped = camel_case(stripped)
    if capitalize:
        return stripped[:1].upper() + stripped[1:]
    return stripped


def property_name(column_name: str) -> str:
    """Model attribute name for a column."""
    return camel_case(column_name)


def model_name(table_name: str) -> str:
    """Model class name for a table (``user_roles`` -> ``UserRole``)."""
    return pascal_case(singularize(table_name))


def structured_type_name(table_name: str, column_name: str, postfix: str = "data") -> str:
    """Name of the interface synthesized for a JSON column."""
    suffix = f"_{postfix}" if postfix else ""
    return pascal_case(f"{model_name(table_name)}_{column_name}{suffix}")


def enum_type_name(table_name: str, column_name: str) -> str:
    """Name the host type of an enum column refers to."""
    return model_name(table_name) + pascal_case(column_name)


def slugify(*parts: str) -> str:
    """Lowercase hyphenated slug used in migration file stems."""
    words: List[str] = []
    for part in parts:
        words.extend(w.lower() for w in split_words(part))
    return "-".join(words)

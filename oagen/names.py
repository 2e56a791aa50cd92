"""Name conversion and path helpers used when generating Go code."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote_plus

_PATH_PARAM_RE = re.compile(r"\{[.;?]?([^{}*]+)\*?\}")

_CAMEL_SEPARATORS = frozenset("-#@!$&=.+:;_~ (){}[]")

_GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer",
        "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
        "interface", "map", "package", "range", "return", "select", "struct",
        "switch", "type", "var",
    }
)

_GO_PREDECLARED = frozenset(
    {
        # Types
        "bool", "byte", "complex64", "complex128", "error", "float32",
        "float64", "int", "int8", "int16", "int32", "int64", "rune", "string",
        "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
        # Constants
        "true", "false", "iota",
        # Zero value
        "nil",
        # Functions
        "append", "cap", "close", "complex", "copy", "delete", "imag", "len",
        "make", "new", "panic", "print", "println", "real", "recover",
    }
)

_PREFIX_WORDS = {
    "-": "Minus",
    "+": "Plus",
    "&": "And",
    "|": "Or",
    "~": "Tilde",
    "=": "Equal",
    "#": "Hash",
    ".": "Dot",
    "*": "Asterisk",
    "^": "Caret",
    "%": "Percent",
}


def _category(char: str) -> str:
    return unicodedata.category(char)


def _is_digit(char: str) -> bool:
    return _category(char) == "Nd"


def _is_number(char: str) -> bool:
    return _category(char).startswith("N")


def _is_letter(char: str) -> bool:
    return _category(char).startswith("L")


def _change_case(char: str, upper: bool) -> str:
    changed = char.upper() if upper else char.lower()
    # Only single-character mappings apply, as for a per-character case change.
    return changed if len(changed) == 1 else char


def uppercase_first_character(text: str) -> str:
    """Upper-case the first character of ``text``."""
    if not text:
        return ""
    return _change_case(text[0], True) + text[1:]


def lowercase_first_character(text: str) -> str:
    """Lower-case the first character of ``text``."""
    if not text:
        return ""
    return _change_case(text[0], False) + text[1:]


def to_camel_case(text: str) -> str:
    """Convert a delimited name such as ``foo_bar-baz`` to ``FooBarBaz``.

    Characters other than letters and digits are dropped; separators start a
    new capitalised word.
    """
    parts = []
    cap_next = True
    for char in text.strip(" "):
        category = _category(char)
        if category in ("Lu", "Nd"):
            parts.append(char)
        elif category == "Ll":
            parts.append(_change_case(char, True) if cap_next else char)
        cap_next = char in _CAMEL_SEPARATORS
    return "".join(parts)


def sorted_keys(mapping: Mapping[str, Any]) -> list[str]:
    """Return the keys of ``mapping`` in sorted order."""
    return sorted(mapping)


def swagger_uri_to_echo_uri(uri: str) -> str:
    """Turn ``/path/{param}`` into ``/path/:param``."""
    return _PATH_PARAM_RE.sub(lambda m: ":" + m.group(1), uri)


def swagger_uri_to_chi_uri(uri: str) -> str:
    """Turn any OpenAPI path parameter form into plain ``{param}``."""
    return _PATH_PARAM_RE.sub(lambda m: "{" + m.group(1) + "}", uri)


def swagger_uri_to_gin_uri(uri: str) -> str:
    """Turn ``/path/{param}`` into ``/path/:param``."""
    return _PATH_PARAM_RE.sub(lambda m: ":" + m.group(1), uri)


def swagger_uri_to_gorilla_uri(uri: str) -> str:
    """Turn any OpenAPI path parameter form into plain ``{param}``."""
    return _PATH_PARAM_RE.sub(lambda m: "{" + m.group(1) + "}", uri)


def ordered_params_from_uri(uri: str) -> list[str]:
    """Return the path parameter names of ``uri`` in order of appearance."""
    return [match.group(1) for match in _PATH_PARAM_RE.finditer(uri)]


def replace_path_params_with_str(uri: str) -> str:
    """Replace every path parameter with ``%s``."""
    return _PATH_PARAM_RE.sub(lambda m: "%s", uri)


def is_go_keyword(text: str) -> bool:
    return text in _GO_KEYWORDS


def is_predeclared_go_identifier(text: str) -> bool:
    return text in _GO_PREDECLARED


def _is_valid_char_for_go_id(index: int, char: str) -> bool:
    if index == 0 and _is_number(char):
        return False
    return _is_letter(char) or char == "_" or _is_number(char)


def is_go_identity(text: str) -> bool:
    """Report whether ``text`` is made of identifier characters and is a keyword."""
    if not all(_is_valid_char_for_go_id(i, c) for i, c in enumerate(text)):
        return False
    return is_go_keyword(text)


def is_valid_go_identity(text: str) -> bool:
    """Report whether ``text`` may name a variable, constant or type."""
    if is_go_identity(text):
        return False
    return not is_predeclared_go_identifier(text)


def sanitize_go_identity(text: str) -> str:
    """Replace illegal characters with ``_`` and escape reserved words."""
    result = "".join(
        char if _is_valid_char_for_go_id(i, char) else "_" for i, char in enumerate(text)
    )
    if is_go_keyword(result) or is_predeclared_go_identifier(result):
        result = "_" + result
    return result


def sanitize_enum_names(names: Iterable[str]) -> dict[str, str]:
    """Map sanitized, unique identifiers to the enum values they stand for."""
    unique = list(dict.fromkeys(names))
    counts: dict[str, int] = {}
    result: dict[str, str] = {}
    for name in unique:
        sanitized = sanitize_go_identity(schema_name_to_type_name(name))
        if sanitized in counts:
            result[sanitized + str(counts[sanitized])] = name
        else:
            result[sanitized] = name
        counts[sanitized] = counts.get(sanitized, 0) + 1
    return result


def _type_name_prefix(name: str) -> str:
    if not name:
        return "Empty"
    prefix = ""
    for char in name:
        if char == "$":
            if len(name) == 1:
                return "DollarSign"
            continue
        word = _PREFIX_WORDS.get(char)
        if word is None:
            if not prefix and _is_digit(char):
                return "N"
            return prefix
        prefix += word
    return prefix


def schema_name_to_type_name(name: str) -> str:
    """Convert a schema name to a valid, camel-cased Go type name."""
    return _type_name_prefix(name) + to_camel_case(name)


def schema_has_additional_properties(schema: Any) -> bool:
    """Report whether a schema asks for additional properties code.

    Either ``additionalProperties: true`` or an additional properties schema
    counts; an absent field does not.
    """
    if schema.additional_properties_allowed:
        return True
    return schema.additional_properties is not None


def path_to_type_name(path: Iterable[str]) -> str:
    """Join camel-cased path elements with underscores."""
    return "_".join(to_camel_case(part) for part in path)


def _to_go_comment(text: str, prefix: str) -> str:
    if not text.strip():
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    first = "// " + prefix if prefix else "//"
    lines = [
        f"{first if index == 0 else '//'} {line}"
        for index, line in enumerate(text.split("\n"))
    ]
    return "\n".join(lines).removesuffix("\n// ")


def string_to_go_comment(text: str) -> str:
    """Render a possibly multi-line string as Go line comments."""
    return _to_go_comment(text, "")


def string_with_type_name_to_go_comment(text: str, type_name: str) -> str:
    """Render a string as Go line comments, naming ``type_name`` on the first line."""
    return _to_go_comment(text, type_name)


def escape_path_elements(path: str) -> str:
    """URL-escape every path element that is not a ``{param}``."""
    return "/".join(
        element if element.startswith("{") and element.endswith("}") else quote_plus(element, safe="")
        for element in path.split("/")
    )
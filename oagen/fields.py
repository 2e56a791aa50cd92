"""Rendering of Go struct fields and struct types from schema descriptions."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .names import string_with_type_name_to_go_comment
from .spec import current_state
from .types import GoSchema, Property

_EXT_GO_NAME = "x-go-name"
_EXT_OMIT_EMPTY = "x-omitempty"
_EXT_EXTRA_TAGS = "x-oapi-codegen-extra-tags"


def _go_field_name(prop: Property) -> str:
    """Return the field name, honouring a string ``x-go-name`` extension."""
    override = prop.extensions.get(_EXT_GO_NAME)
    return override if isinstance(override, str) else prop.go_field_name()


def _omit_empty(prop: Property) -> bool:
    value = prop.extensions.get(_EXT_OMIT_EMPTY)
    return value if isinstance(value, bool) else True


def _extra_tags(prop: Property) -> dict[str, str]:
    value: Any = prop.extensions.get(_EXT_EXTRA_TAGS)
    if not isinstance(value, dict):
        return {}
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
        return {}
    return dict(value)


def _render_field(index: int, prop: Property, disable_ro_pointer: bool) -> str:
    field = ""
    if prop.description:
        # Keep a commented field apart from the field before it.
        if index != 0:
            field += "\n"
        field += string_with_type_name_to_go_comment(prop.description, prop.go_field_name()) + "\n"

    field += f"    {_go_field_name(prop)} {prop.go_type_def()}"

    keep_empty = (
        (prop.required and not prop.read_only and not prop.write_only)
        or prop.nullable
        or not _omit_empty(prop)
        or (prop.required and prop.read_only and disable_ro_pointer)
    )
    suffix = "" if keep_empty else ",omitempty"
    tags = {"json": prop.json_field_name + suffix}
    if prop.needs_form_tag:
        tags["form"] = prop.json_field_name + suffix
    tags.update(_extra_tags(prop))

    rendered = " ".join(f'{key}:"{tags[key]}"' for key in sorted(tags))
    return field + "`" + rendered + "`"


def gen_fields_from_properties(props: Iterable[Property]) -> list[str]:
    """Return one Go struct field declaration, with tags, per property."""
    disable_ro_pointer = current_state().compatibility.disable_required_read_only_as_pointer
    return [_render_field(index, prop, disable_ro_pointer) for index, prop in enumerate(props)]


def gen_struct_from_schema(schema: GoSchema) -> str:
    """Return the Go ``struct { ... }`` literal for an object schema."""
    parts = ["struct {", *gen_fields_from_properties(schema.properties)]
    if schema.has_additional_properties:
        additional = schema.additional_properties_type or GoSchema(go_type="interface{}")
        parts.append(f'AdditionalProperties map[string]{additional.type_decl()} `json:"-"`')
    if schema.union_elements:
        parts.append("union json.RawMessage")
    parts.append("}")
    return "\n".join(parts)
"""Merging of OpenAPI schemas combined with ``allOf``."""

from __future__ import annotations

from collections.abc import Iterable

from .names import schema_has_additional_properties
from .spec import CodegenError, OASchema, Ref


class MergeError(CodegenError):
    """Raised when two schemas cannot be merged into one."""


# Flags that both schemas must agree on, with the names used in messages.
_AGREEING_FLAGS = (
    ("unique_items", "UniqueItems"),
    ("exclusive_min", "ExclusiveMin"),
    ("exclusive_max", "ExclusiveMax"),
    ("nullable", "Nullable"),
    ("read_only", "ReadOnly"),
    ("write_only", "WriteOnly"),
    ("allow_empty_value", "AllowEmptyValue"),
)


def merge_all_of(all_of: Iterable[Ref]) -> OASchema:
    """Merge the schemas of an ``allOf`` list, starting from an empty schema."""
    schema = OASchema()
    for schema_ref in all_of:
        if schema_ref.value is None:
            raise MergeError(f"error merging schemas for AllOf: unresolved reference {schema_ref.ref!r}")
        try:
            schema = merge_openapi_schemas(schema, schema_ref.value)
        except MergeError as exc:
            raise MergeError(f"error merging schemas for AllOf: {exc}") from exc
    return schema


def merge_openapi_schemas(s1: OASchema, s2: OASchema) -> OASchema:
    """Return a schema whose fields combine those of ``s1`` and ``s2``.

    Nested ``allOf`` lists are flattened first. Conflicting types, formats,
    defaults, flags, additional properties or discriminators raise
    :class:`MergeError`.
    """
    extensions = {**s1.extensions, **s2.extensions}
    one_of = [*s1.one_of, *s2.one_of]

    if s1.all_of:
        try:
            s1 = merge_all_of(s1.all_of)
        except MergeError as exc:
            raise MergeError("error transitive merging AllOf on schema 1") from exc
    if s2.all_of:
        try:
            s2 = merge_all_of(s2.all_of)
        except MergeError as exc:
            raise MergeError("error transitive merging AllOf on schema 2") from exc

    if s1.type and s2.type and s1.type != s2.type:
        raise MergeError("can not merge incompatible types")
    if s1.format != s2.format:
        raise MergeError("can not merge incompatible formats")
    if s1.default is not None or s2.default is not None:
        raise MergeError("merging two sets of defaults is undefined")

    for attribute, label in _AGREEING_FLAGS:
        if getattr(s1, attribute) != getattr(s2, attribute):
            raise MergeError(f"merging two schemas with different {label}")

    if schema_has_additional_properties(s1) and schema_has_additional_properties(s2):
        raise MergeError("merging two schemas with additional properties, this is unhandled")
    additional = s2.additional_properties if s2.additional_properties is not None else s1.additional_properties

    if s1.discriminator is not None or s2.discriminator is not None:
        raise MergeError("merging two schemas with discriminators is not supported")

    return OASchema(
        type=s1.type,
        format=s1.format,
        enum=[*s1.enum, *s2.enum],
        required=[*s1.required, *s2.required],
        properties={**s1.properties, **s2.properties},
        additional_properties=additional,
        one_of=one_of,
        all_of=[*s1.all_of, *s2.all_of],
        extensions=extensions,
        **{attribute: getattr(s1, attribute) for attribute, _ in _AGREEING_FLAGS},
    )
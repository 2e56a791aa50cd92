"""Conversion of OpenAPI schemas into Go type descriptions."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal
from typing import Any

from .fields import gen_fields_from_properties, gen_struct_from_schema
from .merge import MergeError, merge_openapi_schemas
from .names import (
    path_to_type_name,
    sanitize_enum_names,
    schema_has_additional_properties,
    schema_name_to_type_name,
    string_to_go_comment,
)
from .refs import is_go_type_reference, ref_path_to_go_type
from .spec import CodegenError, Discriminator, OASchema, Parameter, Ref, current_state
from .types import GoSchema, Property, TypeDefinition, UnionDiscriminator

_EXT_GO_TYPE = "x-go-type"

_INTEGER_FORMATS = {
    "int64": "int64",
    "int32": "int32",
    "int16": "int16",
    "int8": "int8",
    "int": "int",
    "uint64": "uint64",
    "uint32": "uint32",
    "uint16": "uint16",
    "uint8": "uint8",
    "uint": "uint",
    "": "int",
}

_NUMBER_FORMATS = {"double": "float64", "float": "float32", "": "float32"}

_STRING_FORMATS = {
    "byte": "[]byte",
    "email": "openapi_types.Email",
    "date": "openapi_types.Date",
    "date-time": "time.Time",
    "json": "json.RawMessage",
    "uuid": "openapi_types.UUID",
    "binary": "openapi_types.File",
}


def _go_float(value: float) -> str:
    """Format a float the way Go's ``%v`` verb does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign, digits_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(d) for d in digits_tuple)
    point = len(digits) + exponent
    exp10 = point - 1
    prefix = "-" if sign else ""
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exp10 < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp10):02d}"
    if exponent >= 0:
        return prefix + digits + "0" * exponent
    if point > 0:
        return f"{prefix}{digits[:point]}.{digits[point:]}"
    return f"{prefix}0.{'0' * -point}{digits}"


def _go_value_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    if isinstance(value, float):
        return _go_float(value)
    return str(value)


def _named(schema: GoSchema, path: list[str]) -> GoSchema:
    """Give an anonymous schema a type name derived from ``path``."""
    type_name = path_to_type_name(path)
    type_def = TypeDefinition(type_name=type_name, json_name=".".join(path), schema=replace(schema))
    schema.additional_types = [*schema.additional_types, type_def]
    schema.ref_type = type_name
    return schema


def _needs_named_type(schema: GoSchema) -> bool:
    return schema.has_additional_properties or bool(schema.union_elements)


def generate_go_schema(sref: Ref | None, path: Sequence[str]) -> GoSchema:
    """Describe the Go type for the schema behind ``sref``.

    ``path`` holds the names followed to reach the schema; they name any
    helper types that have to be declared.
    """
    path = list(path)
    if sref is None:
        return GoSchema(go_type="interface{}")

    schema = sref.value
    if is_go_type_reference(sref.ref):
        try:
            ref_type = ref_path_to_go_type(sref.ref)
        except CodegenError as exc:
            raise CodegenError(f"error turning reference ({sref.ref}) into a Go type: {exc}") from exc
        return GoSchema(
            go_type=ref_type,
            description=schema.description if isinstance(schema, OASchema) else "",
            define_via_alias=True,
        )
    if not isinstance(schema, OASchema):
        raise CodegenError(f"schema reference {sref.ref!r} has no value")

    out = GoSchema(description=schema.description, oapi_schema=schema)

    if schema.all_of:
        try:
            merged = merge_schemas(schema.all_of, path)
        except CodegenError as exc:
            raise CodegenError(f"error merging schemas: {exc}") from exc
        merged.oapi_schema = schema
        return merged

    if _EXT_GO_TYPE in schema.extensions:
        type_name = schema.extensions[_EXT_GO_TYPE]
        if not isinstance(type_name, str):
            raise CodegenError(f"invalid value for {_EXT_GO_TYPE!r}: expected a string, got {type_name!r}")
        out.go_type = type_name
        return out

    if schema.type in ("", "object"):
        return _object_schema(schema, path, out)

    if schema.enum:
        _primitive_go_type(schema, path, out)
        # Enums are always distinct types, so values are not interchangeable.
        out.define_via_alias = False
        _enum_values(schema, path, out)
        return out

    _primitive_go_type(schema, path, out)
    return out


def _object_schema(schema: OASchema, path: list[str], out: GoSchema) -> GoSchema:
    has_additional = schema_has_additional_properties(schema)
    if not schema.properties and not has_additional and not schema.any_of and not schema.one_of:
        out.go_type = "map[string]interface{}" if schema.type == "object" else "interface{}"
        out.define_via_alias = True
        return out

    out.define_via_alias = False
    out.has_additional_properties = has_additional
    out.additional_properties_type = GoSchema(go_type="interface{}")

    if schema.additional_properties is not None:
        try:
            additional = generate_go_schema(schema.additional_properties, path)
        except CodegenError as exc:
            raise CodegenError(f"error generating type for additional properties: {exc}") from exc
        if _needs_named_type(additional):
            _named(additional, [*path, "AdditionalProperties"])
        out.additional_properties_type = additional
        out.additional_types = [*out.additional_types, *additional.additional_types]

    compatibility = current_state().compatibility
    if (
        not compatibility.disable_flatten_additional_properties
        and not schema.properties
        and not schema.any_of
        and not schema.one_of
    ):
        # A plain dictionary needs no custom marshalling code.
        out.has_additional_properties = False
        out.go_type = f"map[string]{out.additional_properties_type.type_decl()}"
        return out

    for name in sorted(schema.properties):
        prop_ref = schema.properties[name]
        property_path = [*path, name]
        try:
            prop_schema = generate_go_schema(prop_ref, property_path)
        except CodegenError as exc:
            raise CodegenError(f"error generating Go schema for property '{name}': {exc}") from exc
        if _needs_named_type(prop_schema) and not prop_schema.ref_type:
            _named(prop_schema, property_path)
        value = prop_ref.value if isinstance(prop_ref.value, OASchema) else OASchema()
        out.properties.append(
            Property(
                json_field_name=name,
                schema=prop_schema,
                required=name in schema.required,
                description=value.description,
                nullable=value.nullable,
                read_only=value.read_only,
                write_only=value.write_only,
                extensions=value.extensions,
            )
        )

    if schema.any_of:
        try:
            _generate_union(out, schema.any_of, schema.discriminator, path)
        except CodegenError as exc:
            raise CodegenError(f"error generating type for anyOf: {exc}") from exc
    if schema.one_of:
        try:
            _generate_union(out, schema.one_of, schema.discriminator, path)
        except CodegenError as exc:
            raise CodegenError(f"error generating type for oneOf: {exc}") from exc

    out.go_type = gen_struct_from_schema(out)
    return out


def _enum_values(schema: OASchema, path: list[str], out: GoSchema) -> None:
    sanitized = sanitize_enum_names(_go_value_text(value) for value in schema.enum)
    old_conflicts = current_state().compatibility.old_enum_conflicts
    values: dict[str, str] = {}
    for key, value in sanitized.items():
        if old_conflicts:
            enum_name = "Empty" if value == "" else key
            values[schema_name_to_type_name(path_to_type_name([*path, enum_name]))] = value
        else:
            values[schema_name_to_type_name(key)] = value
    out.enum_values = values

    if len(path) > 1:
        type_name = schema_name_to_type_name(path_to_type_name(path))
        type_def = TypeDefinition(type_name=type_name, json_name=".".join(path), schema=replace(out))
        out.additional_types = [*out.additional_types, type_def]
        out.ref_type = type_name


def _primitive_go_type(schema: OASchema, path: list[str], out: GoSchema) -> None:
    """Fill in ``out`` for every schema type other than objects."""
    fmt = schema.format
    kind = schema.type
    try:
        if kind == "array":
            try:
                array_type = generate_go_schema(schema.items, path)
            except CodegenError as exc:
                raise CodegenError(f"error generating type for array: {exc}") from exc
            if _needs_named_type(array_type) and not array_type.ref_type:
                _named(array_type, [*path, "Item"])
            out.array_type = array_type
            out.go_type = "[]" + array_type.type_decl()
            out.additional_types = list(array_type.additional_types)
            out.properties = list(array_type.properties)
        elif kind == "integer":
            if fmt not in _INTEGER_FORMATS:
                raise CodegenError(f"invalid integer format: {fmt}")
            out.go_type = _INTEGER_FORMATS[fmt]
        elif kind == "number":
            if fmt not in _NUMBER_FORMATS:
                raise CodegenError(f"invalid number format: {fmt}")
            out.go_type = _NUMBER_FORMATS[fmt]
        elif kind == "boolean":
            if fmt:
                raise CodegenError(f"invalid format ({fmt}) for boolean")
            out.go_type = "bool"
        elif kind == "string":
            out.go_type = _STRING_FORMATS.get(fmt, "string")
            if fmt == "json":
                out.skip_optional_pointer = True
        else:
            raise CodegenError(f"unhandled Schema type: {kind}")
    except CodegenError as exc:
        raise CodegenError(f"error resolving primitive type: {exc}") from exc
    out.define_via_alias = True


def _generate_union(
    out: GoSchema,
    elements: Sequence[Ref],
    discriminator: Discriminator | None,
    path: list[str],
) -> None:
    if discriminator is not None:
        out.discriminator = UnionDiscriminator(property=discriminator.property_name, mapping={})

    for index, element in enumerate(elements):
        element_schema = generate_go_schema(element, path)
        if not element.ref:
            type_name = schema_name_to_type_name(path_to_type_name([*path, str(index)]))
            out.additional_types.append(TypeDefinition(type_name=type_name, schema=replace(element_schema)))
            element_schema.go_type = type_name

        if discriminator is not None and out.discriminator is not None:
            for value, target in discriminator.mapping.items():
                if target == element.ref:
                    out.discriminator.mapping[value] = element_schema.go_type
                    break
        out.union_elements.append(element_schema.go_type)


def merge_schemas(all_of: Sequence[Ref], path: Sequence[str]) -> GoSchema:
    """Describe the Go type for the combination of the ``allOf`` schemas."""
    path = list(path)
    if current_state().compatibility.old_merge_schemas:
        return _merge_schemas_v1(all_of, path)

    if len(all_of) == 1:
        return generate_go_schema(all_of[0], path)

    schemas = []
    for schema_ref in all_of:
        if not isinstance(schema_ref.value, OASchema):
            raise CodegenError(f"error merging schemas for AllOf: unresolved reference {schema_ref.ref!r}")
        schemas.append(schema_ref.value)

    merged = schemas[0]
    for other in schemas[1:]:
        try:
            merged = merge_openapi_schemas(merged, other)
        except MergeError as exc:
            raise CodegenError(f"error merging schemas for AllOf: {exc}") from exc
    return generate_go_schema(Ref(value=merged), path)


def _merge_schemas_v1(all_of: Sequence[Ref], path: list[str]) -> GoSchema:
    """Merge ``allOf`` schemas the older way, embedding referenced types."""
    out = GoSchema()
    for schema_ref in all_of:
        ref_type = ""
        if is_go_type_reference(schema_ref.ref):
            try:
                ref_type = ref_path_to_go_type(schema_ref.ref)
            except CodegenError as exc:
                raise CodegenError(f"error converting reference path to a go type: {exc}") from exc
        try:
            schema = generate_go_schema(schema_ref, path)
        except CodegenError as exc:
            raise CodegenError(f"error generating Go schema in allOf: {exc}") from exc
        schema.ref_type = ref_type

        for prop in schema.properties:
            try:
                out.add_property(prop)
            except CodegenError as exc:
                raise CodegenError(f"error merging properties: {exc}") from exc

        if schema.has_additional_properties:
            if out.has_additional_properties:
                if schema.additional_properties_type.type_decl() != out.additional_properties_type.type_decl():
                    raise CodegenError("additional properties in allOf have incompatible types")
            else:
                out.has_additional_properties = True
                out.additional_properties_type = schema.additional_properties_type

    try:
        out.go_type = _gen_struct_from_all_of(all_of, path)
    except CodegenError as exc:
        raise CodegenError(f"unable to generate aggregate type for AllOf: {exc}") from exc
    return out


def _gen_struct_from_all_of(all_of: Sequence[Ref], path: list[str]) -> str:
    parts = ["struct {"]
    for schema_ref in all_of:
        if is_go_type_reference(schema_ref.ref):
            go_type = ref_path_to_go_type(schema_ref.ref)
            parts.append(f"   // Embedded struct due to allOf({schema_ref.ref})")
            parts.append(f'   {go_type} `yaml:",inline"`')
            continue
        go_schema = generate_go_schema(schema_ref, path)
        parts.append("   // Embedded fields due to inline allOf schema")
        parts.extend(gen_fields_from_properties(go_schema.properties))
        if go_schema.has_additional_properties:
            additional = go_schema.additional_properties_type.type_decl()
            line = f'AdditionalProperties map[string]{additional} `json:"-"`'
            if line not in parts:
                parts.append(line)
    parts.append("}")
    return "\n".join(parts)


def param_to_go_type(param: Parameter, path: Sequence[str]) -> GoSchema:
    """Describe the Go type of a parameter from its schema or its content."""
    if not param.content and param.schema is None:
        raise CodegenError(f"parameter '{param.name}' has no schema or content")

    if param.schema is not None:
        return generate_go_schema(param.schema, path)

    # Several content types, or none we can decode: pass the value as a string.
    if len(param.content) > 1 or "application/json" not in param.content:
        return GoSchema(go_type="string", description=string_to_go_comment(param.description))

    media_type = param.content["application/json"]
    return generate_go_schema(media_type.schema if media_type is not None else None, path)
"""Descriptions of Go types derived from OpenAPI schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .names import schema_name_to_type_name, uppercase_first_character
from .spec import CodegenError, OASchema, current_state


@dataclass
class UnionDiscriminator:
    """Describes which Go type a ``oneOf``/``anyOf`` value holds."""

    mapping: dict[str, str] = field(default_factory=dict)
    property: str = ""

    def json_tag(self) -> str:
        return f'`json:"{self.property}"`'

    def property_name(self) -> str:
        return schema_name_to_type_name(self.property)


@dataclass
class GoSchema:
    """An OpenAPI schema with the details needed to emit its Go type."""

    go_type: str = ""
    ref_type: str = ""
    array_type: GoSchema | None = None
    enum_values: dict[str, str] = field(default_factory=dict)
    properties: list[Property] = field(default_factory=list)
    has_additional_properties: bool = False
    additional_properties_type: GoSchema | None = None
    additional_types: list[TypeDefinition] = field(default_factory=list)
    skip_optional_pointer: bool = False
    description: str = ""
    union_elements: list[str] = field(default_factory=list)
    discriminator: UnionDiscriminator | None = None
    define_via_alias: bool = False
    oapi_schema: OASchema | None = None

    def is_ref(self) -> bool:
        return bool(self.ref_type)

    def type_decl(self) -> str:
        """Return the Go type to declare: the named type if any, else the literal one."""
        return self.ref_type if self.is_ref() else self.go_type

    def add_property(self, prop: Property) -> None:
        """Add ``prop``, refusing a same-named property that differs."""
        for existing in self.properties:
            if existing.json_field_name == prop.json_field_name and not properties_equal(existing, prop):
                raise CodegenError(
                    f"property '{existing.json_field_name}' already exists with a different type"
                )
        self.properties.append(prop)

    def get_additional_type_defs(self) -> list[TypeDefinition]:
        """Return the helper types needed by the properties and by this schema."""
        result: list[TypeDefinition] = []
        for prop in self.properties:
            result.extend(prop.schema.get_additional_type_defs())
        result.extend(self.additional_types)
        return result


@dataclass
class Property:
    description: str = ""
    json_field_name: str = ""
    schema: GoSchema = field(default_factory=GoSchema)
    required: bool = False
    nullable: bool = False
    read_only: bool = False
    write_only: bool = False
    needs_form_tag: bool = False
    extensions: dict[str, Any] = field(default_factory=dict)

    def go_field_name(self) -> str:
        return schema_name_to_type_name(self.json_field_name)

    def go_type_def(self) -> str:
        """Return the field's Go type, as a pointer where the value may be absent."""
        type_def = self.schema.type_decl()
        if self.schema.skip_optional_pointer:
            return type_def
        disable_ro_pointer = current_state().compatibility.disable_required_read_only_as_pointer
        needs_pointer = (
            not self.required
            or self.nullable
            or (self.read_only and (not self.required or not disable_ro_pointer))
            or self.write_only
        )
        return "*" + type_def if needs_pointer else type_def


@dataclass
class TypeDefinition:
    """A named Go type to declare in generated code."""

    type_name: str = ""
    json_name: str = ""
    schema: GoSchema = field(default_factory=GoSchema)

    def is_alias(self) -> bool:
        """Report whether the type is declared as an alias, ``type Foo = Bar``."""
        return not current_state().compatibility.old_aliasing and self.schema.define_via_alias


@dataclass
class ResponseTypeDefinition(TypeDefinition):
    """A type definition used to decode one content type of a response."""

    content_type_name: str = ""
    response_name: str = ""


@dataclass
class EnumDefinition:
    schema: GoSchema = field(default_factory=GoSchema)
    type_name: str = ""
    value_wrapper: str = ""
    prefix_type_name: bool = False

    def get_values(self) -> dict[str, str]:
        """Return the enum constant names and values, prefixed when names clash."""
        if not self.prefix_type_name:
            return self.schema.enum_values
        return {
            self.type_name + uppercase_first_character(name): value
            for name, value in self.schema.enum_values.items()
        }


@dataclass
class Constants:
    security_scheme_provider_names: list[str] = field(default_factory=list)
    enum_definitions: list[EnumDefinition] = field(default_factory=list)


def properties_equal(a: Property, b: Property) -> bool:
    """Report whether two properties have the same name, type and requiredness."""
    return (
        a.json_field_name == b.json_field_name
        and a.schema.type_decl() == b.schema.type_decl()
        and a.required == b.required
    )
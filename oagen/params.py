"""Descriptions of operation parameters and security requirements."""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from .gotypes import param_to_go_type
from .names import (
    is_go_keyword,
    lowercase_first_character,
    ordered_params_from_uri,
    schema_name_to_type_name,
    sorted_keys,
    uppercase_first_character,
)
from .refs import is_go_type_reference, ref_path_to_go_type
from .spec import CodegenError, Parameter, Ref
from .types import GoSchema

_EXT_GO_NAME = "x-go-name"


def _is_media_type_json(media_type: str) -> bool:
    """Report whether a media type carries JSON, e.g. ``application/vnd.api+json``."""
    base = media_type.split(";", 1)[0].strip().lower()
    kind, _, subtype = base.partition("/")
    if kind != "application" or not subtype:
        return False
    return subtype == "json" or subtype.endswith("+json")


@dataclass
class ParameterDefinition:
    """A parameter of an operation together with its Go type."""

    param_name: str = ""
    location: str = ""
    required: bool = False
    spec: Parameter = field(default_factory=Parameter)
    schema: GoSchema = field(default_factory=GoSchema)

    def type_def(self) -> str:
        """Return the Go type of the parameter, without a pointer."""
        return self.schema.type_decl()

    def json_tag(self) -> str:
        if self.required:
            return f'`json:"{self.param_name}"`'
        return f'`json:"{self.param_name},omitempty"`'

    def is_json(self) -> bool:
        """Report whether the parameter has exactly one content type, a JSON one."""
        content = self.spec.content
        return len(content) == 1 and _is_media_type_json(next(iter(content)))

    def is_pass_through(self) -> bool:
        """Report whether the parameter value is passed on undecoded."""
        content = self.spec.content
        if len(content) > 1:
            return True
        if len(content) == 1:
            return not self.is_json()
        return False

    def is_styled(self) -> bool:
        return self.spec.schema is not None

    def style(self) -> str:
        """Return the serialisation style, defaulting by location."""
        if self.spec.style:
            return self.spec.style
        if self.spec.location in ("path", "header"):
            return "simple"
        if self.spec.location in ("query", "cookie"):
            return "form"
        raise CodegenError("unknown parameter format")

    def explode(self) -> bool:
        """Return whether values are exploded, defaulting by location."""
        if self.spec.explode is not None:
            return self.spec.explode
        if self.spec.location in ("path", "header"):
            return False
        if self.spec.location in ("query", "cookie"):
            return True
        raise CodegenError("unknown parameter format")

    def go_variable_name(self) -> str:
        """Return a Go variable name for the parameter that is not a keyword."""
        name = lowercase_first_character(self.go_name())
        if is_go_keyword(name):
            name = "p" + uppercase_first_character(name)
        if name and unicodedata.category(name[0]).startswith("N"):
            name = "n" + name
        return name

    def go_name(self) -> str:
        """Return the Go name, honouring a string ``x-go-name`` extension."""
        name = self.param_name
        override = self.spec.extensions.get(_EXT_GO_NAME)
        if isinstance(override, str):
            name = override
        return schema_name_to_type_name(name)

    def indirect_optional(self) -> bool:
        return not self.required and not self.schema.skip_optional_pointer


def find_parameter_by_name(
    params: Iterable[ParameterDefinition], name: str
) -> ParameterDefinition | None:
    """Return the first parameter named ``name``, or ``None``."""
    return next((param for param in params if param.param_name == name), None)


@dataclass
class SecurityDefinition:
    provider_name: str = ""
    scopes: list[str] = field(default_factory=list)


def describe_security_definition(
    requirements: Iterable[Mapping[str, Sequence[str]]],
) -> list[SecurityDefinition]:
    """Flatten security requirements into provider and scope pairs."""
    return [
        SecurityDefinition(provider_name=name, scopes=list(requirement[name]))
        for requirement in requirements
        for name in sorted_keys(requirement)
    ]


def filter_parameter_definitions_by_type(
    params: Iterable[ParameterDefinition], location: str
) -> list[ParameterDefinition]:
    """Return the parameters found in ``location`` (path, query, header, cookie)."""
    return [param for param in params if param.location == location]


def describe_parameters(params: Iterable[Ref], path: Sequence[str] | None) -> list[ParameterDefinition]:
    """Describe each parameter with its Go type, in the given order."""
    base = list(path or [])
    result = []
    for param_ref in params:
        param = param_ref.value
        if not isinstance(param, Parameter):
            raise CodegenError(f"parameter reference {param_ref.ref!r} has no value")
        try:
            go_type = param_to_go_type(param, [*base, param.name])
        except CodegenError as exc:
            raise CodegenError(f"error generating type for param ({param.name}): {exc}") from exc

        definition = ParameterDefinition(
            param_name=param.name,
            location=param.location,
            required=param.required,
            spec=param,
            schema=go_type,
        )
        # A reference to a predefined parameter uses that type's name.
        if is_go_type_reference(param_ref.ref):
            try:
                definition.schema.go_type = ref_path_to_go_type(param_ref.ref)
            except CodegenError as exc:
                raise CodegenError(
                    f"error dereferencing ({param_ref.ref}) for param ({param.name}): {exc}"
                ) from exc
        result.append(definition)
    return result


def sort_params_by_path(path: str, params: Sequence[ParameterDefinition]) -> list[ParameterDefinition]:
    """Order path parameters as they appear in ``path``, checking they all exist."""
    names = ordered_params_from_uri(path)
    if len(names) != len(params):
        raise CodegenError(
            f"path '{path}' has {len(names)} positional parameters, "
            f"but spec has {len(params)} declared"
        )
    result = []
    for name in names:
        param = find_parameter_by_name(params, name)
        if param is None:
            raise CodegenError(
                f"path '{path}' refers to parameter '{name}', which doesn't exist in specification"
            )
        result.append(param)
    return result
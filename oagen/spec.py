"""Object model of an OpenAPI 3 document and the generator's shared state."""

from __future__ import annotations

import contextvars
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import yaml


class CodegenError(Exception):
    """Raised when a document cannot be loaded or code cannot be generated."""


@dataclass(eq=False, repr=False)
class Ref:
    """A value that may have been reached through a ``$ref``.

    ``ref`` is the reference string, empty for inline values. ``value`` is the
    referenced or inline object; it stays ``None`` for external references.
    """

    ref: str = ""
    value: Any = None

    def __repr__(self) -> str:
        kind = type(self.value).__name__ if self.value is not None else "None"
        return f"Ref(ref={self.ref!r}, value=<{kind}>)"


@dataclass
class Discriminator:
    property_name: str = ""
    mapping: dict[str, str] = field(default_factory=dict)


@dataclass
class OASchema:
    type: str = ""
    format: str = ""
    title: str = ""
    description: str = ""
    enum: list[Any] = field(default_factory=list)
    default: Any = None
    example: Any = None
    nullable: bool = False
    read_only: bool = False
    write_only: bool = False
    allow_empty_value: bool = False
    unique_items: bool = False
    exclusive_min: bool = False
    exclusive_max: bool = False
    deprecated: bool = False
    required: list[str] = field(default_factory=list)
    properties: dict[str, Ref] = field(default_factory=dict)
    additional_properties: Ref | None = None
    additional_properties_allowed: bool | None = None
    items: Ref | None = None
    all_of: list[Ref] = field(default_factory=list)
    one_of: list[Ref] = field(default_factory=list)
    any_of: list[Ref] = field(default_factory=list)
    not_: Ref | None = None
    discriminator: Discriminator | None = None
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass
class Encoding:
    content_type: str = ""
    style: str = ""
    explode: bool | None = None


@dataclass
class MediaType:
    schema: Ref | None = None
    example: Any = None
    examples: dict[str, Ref] = field(default_factory=dict)
    encoding: dict[str, Encoding] = field(default_factory=dict)


@dataclass
class Parameter:
    name: str = ""
    location: str = ""
    description: str = ""
    required: bool = False
    style: str = ""
    explode: bool | None = None
    allow_empty_value: bool = False
    deprecated: bool = False
    schema: Ref | None = None
    content: dict[str, MediaType | None] = field(default_factory=dict)
    examples: dict[str, Ref] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass
class RequestBody:
    description: str = ""
    required: bool = False
    content: dict[str, MediaType | None] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass
class Header:
    description: str = ""
    required: bool = False
    schema: Ref | None = None
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass
class Response:
    description: str | None = None
    headers: dict[str, Ref] = field(default_factory=dict)
    content: dict[str, MediaType | None] = field(default_factory=dict)
    links: dict[str, Ref] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass
class Operation:
    operation_id: str = ""
    summary: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)
    parameters: list[Ref] = field(default_factory=list)
    request_body: Ref | None = None
    responses: dict[str, Ref] = field(default_factory=dict)
    callbacks: dict[str, Ref] = field(default_factory=dict)
    security: list[dict[str, list[str]]] | None = None
    servers: list[Any] | None = None
    deprecated: bool = False
    extensions: dict[str, Any] = field(default_factory=dict)


_METHODS = ("connect", "delete", "get", "head", "options", "patch", "post", "put", "trace")


@dataclass
class PathItem:
    summary: str = ""
    description: str = ""
    parameters: list[Ref] = field(default_factory=list)
    servers: list[Any] = field(default_factory=list)
    connect: Operation | None = None
    delete: Operation | None = None
    get: Operation | None = None
    head: Operation | None = None
    options: Operation | None = None
    patch: Operation | None = None
    post: Operation | None = None
    put: Operation | None = None
    trace: Operation | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    def operations(self) -> dict[str, Operation]:
        """Return the defined operations keyed by upper-case HTTP method."""
        result = {}
        for method in _METHODS:
            operation = getattr(self, method)
            if operation is not None:
                result[method.upper()] = operation
        return result


@dataclass
class Components:
    schemas: dict[str, Ref] = field(default_factory=dict)
    parameters: dict[str, Ref] = field(default_factory=dict)
    headers: dict[str, Ref] = field(default_factory=dict)
    request_bodies: dict[str, Ref] = field(default_factory=dict)
    responses: dict[str, Ref] = field(default_factory=dict)
    security_schemes: dict[str, Ref] = field(default_factory=dict)
    examples: dict[str, Ref] = field(default_factory=dict)
    links: dict[str, Ref] = field(default_factory=dict)
    callbacks: dict[str, Ref] = field(default_factory=dict)


@dataclass
class Document:
    openapi: str = ""
    info: dict[str, Any] = field(default_factory=dict)
    servers: list[Any] = field(default_factory=list)
    paths: dict[str, PathItem] = field(default_factory=dict)
    components: Components = field(default_factory=Components)
    security: list[dict[str, list[str]]] = field(default_factory=list)
    tags: list[Any] = field(default_factory=list)
    extensions: dict[str, Any] = field(default_factory=dict)


_COMPONENT_KINDS = {
    "schemas": "schemas",
    "parameters": "parameters",
    "headers": "headers",
    "requestBodies": "request_bodies",
    "responses": "responses",
    "securitySchemes": "security_schemes",
    "examples": "examples",
    "links": "links",
    "callbacks": "callbacks",
}


def _mapping(raw: Any, what: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise CodegenError(f"{what} must be a mapping, got {type(raw).__name__}")
    return {str(key): value for key, value in raw.items()}


def _text(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CodegenError(f"field {key!r} must be a string, got {value!r}")
    return value


def _flag(raw: Mapping[str, Any], key: str) -> bool:
    value = raw.get(key, False)
    if not isinstance(value, bool):
        raise CodegenError(f"field {key!r} must be a boolean, got {value!r}")
    return value


def _optional_flag(raw: Mapping[str, Any], key: str) -> bool | None:
    if raw.get(key) is None:
        return None
    return _flag(raw, key)


def _list(raw: Mapping[str, Any], key: str) -> list[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise CodegenError(f"field {key!r} must be a list, got {value!r}")
    return value


def _extensions(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in raw.items() if key.startswith("x-")}


def _security(raw: Any) -> list[dict[str, list[str]]]:
    if not isinstance(raw, list):
        raise CodegenError("security must be a list of requirements")
    return [
        {name: list(scopes or []) for name, scopes in _mapping(item, "security requirement").items()}
        for item in raw
    ]


class _Loader:
    """Builds the object model and then links local references."""

    def __init__(self) -> None:
        self._pending: list[Ref] = []

    def ref(self, raw: Any, build: Callable[[dict[str, Any]], Any]) -> Ref | None:
        if raw is None:
            return None
        data = _mapping(raw, "object")
        if "$ref" in data:
            target = data["$ref"]
            if not isinstance(target, str):
                raise CodegenError(f"$ref must be a string, got {target!r}")
            reference = Ref(ref=target)
            self._pending.append(reference)
            return reference
        return Ref(value=build(data))

    def ref_map(self, raw: Any, build: Callable[[dict[str, Any]], Any]) -> dict[str, Ref]:
        return {key: self.ref(value, build) for key, value in _mapping(raw, "map").items()}

    def ref_list(self, raw: list[Any], build: Callable[[dict[str, Any]], Any]) -> list[Ref]:
        return [self.ref(item, build) for item in raw]

    def schema(self, raw: dict[str, Any]) -> OASchema:
        additional = raw.get("additionalProperties")
        additional_ref = None
        allowed = None
        if isinstance(additional, bool):
            allowed = additional
        elif additional is not None:
            additional_ref = self.ref(additional, self.schema)
        discriminator = None
        if raw.get("discriminator") is not None:
            disc = _mapping(raw["discriminator"], "discriminator")
            discriminator = Discriminator(
                property_name=_text(disc, "propertyName"),
                mapping={str(k): str(v) for k, v in _mapping(disc.get("mapping"), "mapping").items()},
            )
        return OASchema(
            type=_text(raw, "type"),
            format=_text(raw, "format"),
            title=_text(raw, "title"),
            description=_text(raw, "description"),
            enum=_list(raw, "enum"),
            default=raw.get("default"),
            example=raw.get("example"),
            nullable=_flag(raw, "nullable"),
            read_only=_flag(raw, "readOnly"),
            write_only=_flag(raw, "writeOnly"),
            allow_empty_value=_flag(raw, "allowEmptyValue"),
            unique_items=_flag(raw, "uniqueItems"),
            exclusive_min=_flag(raw, "exclusiveMinimum"),
            exclusive_max=_flag(raw, "exclusiveMaximum"),
            deprecated=_flag(raw, "deprecated"),
            required=[str(name) for name in _list(raw, "required")],
            properties=self.ref_map(raw.get("properties"), self.schema),
            additional_properties=additional_ref,
            additional_properties_allowed=allowed,
            items=self.ref(raw.get("items"), self.schema),
            all_of=self.ref_list(_list(raw, "allOf"), self.schema),
            one_of=self.ref_list(_list(raw, "oneOf"), self.schema),
            any_of=self.ref_list(_list(raw, "anyOf"), self.schema),
            not_=self.ref(raw.get("not"), self.schema),
            discriminator=discriminator,
            extensions=_extensions(raw),
        )

    def example(self, raw: dict[str, Any]) -> dict[str, Any]:
        return raw

    def content(self, raw: Any) -> dict[str, MediaType | None]:
        return {
            key: None if value is None else self.media_type(_mapping(value, "media type"))
            for key, value in _mapping(raw, "content").items()
        }

    def media_type(self, raw: dict[str, Any]) -> MediaType:
        encoding = {}
        for key, value in _mapping(raw.get("encoding"), "encoding").items():
            data = _mapping(value, "encoding")
            encoding[key] = Encoding(
                content_type=_text(data, "contentType"),
                style=_text(data, "style"),
                explode=_optional_flag(data, "explode"),
            )
        return MediaType(
            schema=self.ref(raw.get("schema"), self.schema),
            example=raw.get("example"),
            examples=self.ref_map(raw.get("examples"), self.example),
            encoding=encoding,
        )

    def parameter(self, raw: dict[str, Any]) -> Parameter:
        return Parameter(
            name=_text(raw, "name"),
            location=_text(raw, "in"),
            description=_text(raw, "description"),
            required=_flag(raw, "required"),
            style=_text(raw, "style"),
            explode=_optional_flag(raw, "explode"),
            allow_empty_value=_flag(raw, "allowEmptyValue"),
            deprecated=_flag(raw, "deprecated"),
            schema=self.ref(raw.get("schema"), self.schema),
            content=self.content(raw.get("content")),
            examples=self.ref_map(raw.get("examples"), self.example),
            extensions=_extensions(raw),
        )

    def request_body(self, raw: dict[str, Any]) -> RequestBody:
        return RequestBody(
            description=_text(raw, "description"),
            required=_flag(raw, "required"),
            content=self.content(raw.get("content")),
            extensions=_extensions(raw),
        )

    def header(self, raw: dict[str, Any]) -> Header:
        return Header(
            description=_text(raw, "description"),
            required=_flag(raw, "required"),
            schema=self.ref(raw.get("schema"), self.schema),
            extensions=_extensions(raw),
        )

    def response(self, raw: dict[str, Any]) -> Response:
        description = raw.get("description")
        return Response(
            description=None if description is None else str(description),
            headers=self.ref_map(raw.get("headers"), self.header),
            content=self.content(raw.get("content")),
            links=self.ref_map(raw.get("links"), self.example),
            extensions=_extensions(raw),
        )

    def callback(self, raw: dict[str, Any]) -> dict[str, PathItem]:
        return {
            key: self.path_item(_mapping(value, "path item"))
            for key, value in raw.items()
            if not key.startswith("x-")
        }

    def operation(self, raw: dict[str, Any]) -> Operation:
        return Operation(
            operation_id=_text(raw, "operationId"),
            summary=_text(raw, "summary"),
            description=_text(raw, "description"),
            tags=[str(tag) for tag in _list(raw, "tags")],
            parameters=self.ref_list(_list(raw, "parameters"), self.parameter),
            request_body=self.ref(raw.get("requestBody"), self.request_body),
            responses=self.ref_map(raw.get("responses"), self.response),
            callbacks=self.ref_map(raw.get("callbacks"), self.callback),
            security=_security(raw["security"]) if raw.get("security") is not None else None,
            servers=_list(raw, "servers") if raw.get("servers") is not None else None,
            deprecated=_flag(raw, "deprecated"),
            extensions=_extensions(raw),
        )

    def path_item(self, raw: dict[str, Any]) -> PathItem:
        operations = {
            method: self.operation(_mapping(raw[method], "operation"))
            for method in _METHODS
            if raw.get(method) is not None
        }
        return PathItem(
            summary=_text(raw, "summary"),
            description=_text(raw, "description"),
            parameters=self.ref_list(_list(raw, "parameters"), self.parameter),
            servers=_list(raw, "servers"),
            extensions=_extensions(raw),
            **operations,
        )

    def components(self, raw: dict[str, Any]) -> Components:
        return Components(
            schemas=self.ref_map(raw.get("schemas"), self.schema),
            parameters=self.ref_map(raw.get("parameters"), self.parameter),
            headers=self.ref_map(raw.get("headers"), self.header),
            request_bodies=self.ref_map(raw.get("requestBodies"), self.request_body),
            responses=self.ref_map(raw.get("responses"), self.response),
            security_schemes=self.ref_map(raw.get("securitySchemes"), self.example),
            examples=self.ref_map(raw.get("examples"), self.example),
            links=self.ref_map(raw.get("links"), self.example),
            callbacks=self.ref_map(raw.get("callbacks"), self.callback),
        )

    def document(self, raw: dict[str, Any]) -> Document:
        paths = {
            key: self.path_item(_mapping(value, "path item"))
            for key, value in _mapping(raw.get("paths"), "paths").items()
            if not key.startswith("x-")
        }
        return Document(
            openapi=str(raw.get("openapi", "")),
            info=_mapping(raw.get("info"), "info"),
            servers=_list(raw, "servers"),
            paths=paths,
            components=self.components(_mapping(raw.get("components"), "components")),
            security=_security(raw["security"]) if raw.get("security") is not None else [],
            tags=_list(raw, "tags"),
            extensions=_extensions(raw),
        )

    def resolve(self, components: Components) -> None:
        for reference in self._pending:
            reference.value = self._target(reference, components, set())

    def _target(self, reference: Ref, components: Components, seen: set[int]) -> Any:
        if not reference.ref.startswith("#"):
            return None
        parts = reference.ref.split("/")
        if len(parts) != 4 or parts[1] != "components" or parts[2] not in _COMPONENT_KINDS:
            raise CodegenError(f"unsupported reference: {reference.ref}")
        name = parts[3].replace("~1", "/").replace("~0", "~")
        target = getattr(components, _COMPONENT_KINDS[parts[2]]).get(name)
        if target is None:
            raise CodegenError(f"unresolved reference: {reference.ref}")
        if not target.ref:
            return target.value
        if id(target) in seen:
            raise CodegenError(f"circular reference: {reference.ref}")
        seen.add(id(target))
        return self._target(target, components, seen)


def load_document(data: str | bytes | Mapping[str, Any]) -> Document:
    """Load an OpenAPI document from YAML or JSON text, or from a mapping."""
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8")
    if isinstance(data, str):
        try:
            data = yaml.safe_load(data)
        except yaml.YAMLError as exc:
            raise CodegenError(f"error parsing document: {exc}") from exc
    if not isinstance(data, Mapping):
        raise CodegenError("an OpenAPI document must be a mapping")
    loader = _Loader()
    document = loader.document(_mapping(data, "document"))
    loader.resolve(document.components)
    return document


@dataclass
class CompatibilityOptions:
    old_merge_schemas: bool = False
    old_enum_conflicts: bool = False
    old_aliasing: bool = False
    disable_flatten_additional_properties: bool = False
    disable_required_read_only_as_pointer: bool = False
    always_prefix_enum_values: bool = False


@dataclass
class GeneratorState:
    """Settings and document shared by one code generation run.

    ``import_mapping`` maps an external document path to the Go package name
    used to qualify types referenced from it.
    """

    compatibility: CompatibilityOptions = field(default_factory=CompatibilityOptions)
    spec: Document = field(default_factory=Document)
    import_mapping: dict[str, str] = field(default_factory=dict)


_STATE: contextvars.ContextVar[GeneratorState] = contextvars.ContextVar(
    "oagen_generator_state", default=GeneratorState()
)


def current_state() -> GeneratorState:
    """Return the generator state in effect."""
    return _STATE.get()


@contextmanager
def use_state(state: GeneratorState) -> Iterator[GeneratorState]:
    """Make ``state`` the current generator state inside a ``with`` block."""
    token = _STATE.set(state)
    try:
        yield state
    finally:
        _STATE.reset(token)
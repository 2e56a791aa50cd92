"""Descriptions of API operations, their bodies and responses."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from .fields import gen_struct_from_schema
from .gotypes import generate_go_schema
from .names import schema_name_to_type_name, sorted_keys, to_camel_case
from .params import (
    ParameterDefinition,
    SecurityDefinition,
    _is_media_type_json,
    describe_parameters,
    describe_security_definition,
    filter_parameter_definitions_by_type,
    sort_params_by_path,
)
from .refs import is_go_type_reference, ref_path_to_go_type
from .spec import CodegenError, Document, Operation, Ref
from .types import GoSchema, Property, ResponseTypeDefinition, TypeDefinition

_CONTENT_TYPES_JSON = ("application/json", "text/x-json")
_CONTENT_TYPES_YAML = ("application/yaml", "application/x-yaml", "text/yaml", "text/x-yaml")
_CONTENT_TYPES_XML = ("application/xml", "text/xml")

_STATUS_CODE_RE = re.compile(r"[+-]?[0-9]+")


def _response_type_prefix(content_type: str) -> str | None:
    if content_type in _CONTENT_TYPES_JSON:
        return "JSON"
    if content_type in _CONTENT_TYPES_YAML:
        return "YAML"
    if content_type in _CONTENT_TYPES_XML:
        return "XML"
    return None


@dataclass
class RequestBodyEncoding:
    content_type: str = ""
    style: str = ""
    explode: bool | None = None


@dataclass
class RequestBodyDefinition:
    """One content type of an operation's request body."""

    required: bool = False
    schema: GoSchema = field(default_factory=GoSchema)
    name_tag: str = ""
    content_type: str = ""
    default: bool = False
    encoding: dict[str, RequestBodyEncoding] = field(default_factory=dict)

    def type_def(self, op_id: str) -> TypeDefinition:
        """Return the named Go type for this body."""
        return TypeDefinition(type_name=f"{op_id}{self.name_tag}RequestBody", schema=self.schema)

    def custom_type(self) -> bool:
        """Report whether the body is an inline type rather than a predefined one."""
        return self.schema.ref_type == ""

    def suffix(self) -> str:
        """Return the suffix of function names for this body; none for the default one."""
        if self.default:
            return ""
        return "With" + self.name_tag + "Body"

    def is_supported_by_client(self) -> bool:
        return self.name_tag in ("JSON", "Formdata", "Text")

    def is_supported(self) -> bool:
        return self.name_tag != ""

    def is_fixed_content_type(self) -> bool:
        return "*" not in self.content_type


@dataclass
class ResponseContentDefinition:
    """One content type of a response."""

    schema: GoSchema = field(default_factory=GoSchema)
    content_type: str = ""
    name_tag: str = ""

    def type_def(self, op_id: str, status_code: Any) -> TypeDefinition:
        return TypeDefinition(
            type_name=f"{op_id}{status_code}{self.name_tag_or_content_type()}Response",
            schema=self.schema,
        )

    def is_supported(self) -> bool:
        return self.name_tag != ""

    def has_fixed_content_type(self) -> bool:
        return "*" not in self.content_type

    def name_tag_or_content_type(self) -> str:
        if self.name_tag:
            return self.name_tag
        return schema_name_to_type_name(self.content_type)


@dataclass
class ResponseHeaderDefinition:
    name: str = ""
    go_name: str = ""
    schema: GoSchema = field(default_factory=GoSchema)


@dataclass
class ResponseDefinition:
    """A response of an operation for one status code."""

    status_code: str = ""
    description: str = ""
    contents: list[ResponseContentDefinition] = field(default_factory=list)
    headers: list[ResponseHeaderDefinition] = field(default_factory=list)
    ref: str = ""

    def has_fixed_status_code(self) -> bool:
        return _STATUS_CODE_RE.fullmatch(self.status_code) is not None

    def go_name(self) -> str:
        return schema_name_to_type_name(self.status_code)

    def is_ref(self) -> bool:
        return self.ref != ""


@dataclass
class OperationDefinition:
    """An operation of the API with everything needed to generate code for it."""

    operation_id: str = ""
    path_params: list[ParameterDefinition] = field(default_factory=list)
    header_params: list[ParameterDefinition] = field(default_factory=list)
    query_params: list[ParameterDefinition] = field(default_factory=list)
    cookie_params: list[ParameterDefinition] = field(default_factory=list)
    type_definitions: list[TypeDefinition] = field(default_factory=list)
    security_definitions: list[SecurityDefinition] = field(default_factory=list)
    body_required: bool = False
    bodies: list[RequestBodyDefinition] = field(default_factory=list)
    responses: list[ResponseDefinition] = field(default_factory=list)
    summary: str = ""
    method: str = ""
    path: str = ""
    spec: Operation | None = None

    def params(self) -> list[ParameterDefinition]:
        """Return query, header and cookie parameters, which form the params object."""
        return [*self.query_params, *self.header_params, *self.cookie_params]

    def all_params(self) -> list[ParameterDefinition]:
        return [*self.params(), *self.path_params]

    def requires_param_object(self) -> bool:
        return bool(self.params())

    def has_body(self) -> bool:
        return self.spec is not None and self.spec.request_body is not None

    def summary_as_comment(self) -> str:
        if not self.summary:
            return ""
        lines = self.summary.removesuffix("\n").split("\n")
        return "\n".join("// " + line for line in lines)

    def get_response_type_definitions(self) -> list[ResponseTypeDefinition]:
        """Return the types used to decode JSON, YAML and XML responses."""
        result: list[ResponseTypeDefinition] = []
        responses = self.spec.responses if self.spec is not None else {}
        for response_name in sorted_keys(responses):
            response_ref = responses[response_name]
            if response_ref is None or response_ref.value is None:
                continue
            content = response_ref.value.content
            for content_type in sorted_keys(content):
                media_type = content[content_type]
                if media_type is None or media_type.schema is None:
                    continue
                try:
                    schema = generate_go_schema(media_type.schema, [response_name])
                except CodegenError as exc:
                    raise CodegenError(
                        f"Unable to determine Go type for {self.operation_id}.{content_type}: {exc}"
                    ) from exc
                prefix = _response_type_prefix(content_type)
                if prefix is None:
                    continue
                definition = ResponseTypeDefinition(
                    type_name=prefix + to_camel_case(response_name),
                    schema=schema,
                    response_name=response_name,
                    content_type_name=content_type,
                )
                if is_go_type_reference(media_type.schema.ref):
                    try:
                        definition.schema.ref_type = ref_path_to_go_type(media_type.schema.ref)
                    except CodegenError as exc:
                        raise CodegenError(f"error dereferencing response Ref: {exc}") from exc
                result.append(definition)
        return result

    def has_masked_request_content_types(self) -> bool:
        return any(not body.is_fixed_content_type() for body in self.bodies)


def generate_default_operation_id(op_name: str, request_path: str) -> str:
    """Build an operation id from the method and path, e.g. ``GetV1FooBar``."""
    if not op_name:
        raise CodegenError("operation name cannot be an empty string")
    if not request_path:
        raise CodegenError("request path cannot be an empty string")
    parts = [op_name.lower(), *(part for part in request_path.split("/") if part)]
    return to_camel_case("-".join(parts))


def _body_tag(content_type: str) -> str | None:
    if _is_media_type_json(content_type):
        return "JSON"
    if content_type.startswith("multipart/"):
        return "Multipart"
    if content_type == "application/x-www-form-urlencoded":
        return "Formdata"
    if content_type == "text/plain":
        return "Text"
    return None


def _response_tag(content_type: str) -> str | None:
    if _is_media_type_json(content_type):
        return "JSON"
    if content_type == "application/x-www-form-urlencoded":
        return "Formdata"
    if content_type.startswith("multipart/"):
        return "Multipart"
    if content_type == "text/plain":
        return "Text"
    return None


def generate_body_definitions(
    operation_id: str, body_ref: Ref | None
) -> tuple[list[RequestBodyDefinition], list[TypeDefinition]]:
    """Describe each content type of a request body, with the types it needs."""
    if body_ref is None or body_ref.value is None:
        return [], []
    body = body_ref.value

    bodies: list[RequestBodyDefinition] = []
    type_defs: list[TypeDefinition] = []
    for content_type in sorted_keys(body.content):
        media_type = body.content[content_type]
        tag = _body_tag(content_type)
        if tag is None:
            bodies.append(RequestBodyDefinition(required=body.required, content_type=content_type))
            continue

        type_name = operation_id + tag + "Body"
        schema_ref = media_type.schema if media_type is not None else None
        try:
            schema = generate_go_schema(schema_ref, [type_name])
        except CodegenError as exc:
            raise CodegenError(f"error generating request body definition: {exc}") from exc

        if schema_ref is not None and is_go_type_reference(schema_ref.ref):
            try:
                schema.ref_type = ref_path_to_go_type(schema_ref.ref)
            except CodegenError as exc:
                raise CodegenError(
                    f"error turning reference ({schema_ref.ref}) into a Go type: {exc}"
                ) from exc

        # An inline body gets a type of its own so that it is easy to marshal.
        if not schema.ref_type:
            type_defs.append(TypeDefinition(type_name=type_name, schema=replace(schema)))
            schema.ref_type = type_name

        encodings = getattr(media_type, "encoding", None) or {}
        bodies.append(
            RequestBodyDefinition(
                required=body.required,
                schema=schema,
                name_tag=tag,
                content_type=content_type,
                default=tag == "JSON",
                encoding={
                    name: RequestBodyEncoding(
                        content_type=encoding.content_type,
                        style=encoding.style,
                        explode=encoding.explode,
                    )
                    for name, encoding in encodings.items()
                },
            )
        )
    bodies.sort(key=lambda definition: definition.content_type)
    return bodies, type_defs


def generate_response_definitions(
    operation_id: str, responses: Mapping[str, Ref | None]
) -> list[ResponseDefinition]:
    """Describe each response of an operation, in status code order."""
    result: list[ResponseDefinition] = []
    # Only the first response pointing at a shared component may alias it.
    used_refs: set[str] = set()

    for status_code in sorted_keys(responses):
        response_ref = responses[status_code]
        if response_ref is None:
            continue
        response = response_ref.value
        if response is None:
            raise CodegenError(f"response reference {response_ref.ref!r} has no value")

        contents: list[ResponseContentDefinition] = []
        for content_type in sorted_keys(response.content):
            media_type = response.content[content_type]
            tag = _response_tag(content_type)
            if tag is None:
                contents.append(ResponseContentDefinition(content_type=content_type))
                continue
            type_name = operation_id + status_code + tag + "Response"
            try:
                schema = generate_go_schema(
                    media_type.schema if media_type is not None else None, [type_name]
                )
            except CodegenError as exc:
                raise CodegenError(f"error generating request body definition: {exc}") from exc
            contents.append(ResponseContentDefinition(content_type=content_type, name_tag=tag, schema=schema))

        headers: list[ResponseHeaderDefinition] = []
        for header_name in sorted_keys(response.headers):
            header_ref = response.headers[header_name]
            header_schema = header_ref.value.schema if header_ref.value is not None else None
            try:
                schema = generate_go_schema(header_schema, [])
            except CodegenError as exc:
                raise CodegenError(f"error generating response header definition: {exc}") from exc
            headers.append(
                ResponseHeaderDefinition(name=header_name, go_name=to_camel_case(header_name), schema=schema)
            )

        definition = ResponseDefinition(
            status_code=status_code,
            description=response.description or "",
            contents=contents,
            headers=headers,
        )
        if is_go_type_reference(response_ref.ref):
            try:
                ref_type = ref_path_to_go_type(response_ref.ref)
            except CodegenError as exc:
                raise CodegenError(
                    f"error turning reference ({response_ref.ref}) into a Go type: {exc}"
                ) from exc
            if ref_type not in used_refs:
                definition.ref = ref_type
                used_refs.add(ref_type)
        result.append(definition)
    return result


def generate_params_types(op: OperationDefinition) -> list[TypeDefinition]:
    """Define the params object holding an operation's query, header and cookie parameters."""
    type_defs: list[TypeDefinition] = []
    type_name = op.operation_id + "Params"

    params_schema = GoSchema()
    for param in op.params():
        style = param.style()
        prop_schema = param.schema
        if prop_schema.has_additional_properties:
            prop_ref_name = f"{type_name}_{param.go_name()}"
            prop_schema = replace(param.schema, ref_type=prop_ref_name)
            type_defs.append(TypeDefinition(type_name=prop_ref_name, schema=param.schema))
        params_schema.properties.append(
            Property(
                description=param.spec.description,
                json_field_name=param.param_name,
                required=param.required,
                schema=prop_schema,
                needs_form_tag=style == "form",
                extensions=param.spec.extensions,
            )
        )

    params_schema.description = op.spec.description if op.spec is not None else ""
    params_schema.go_type = gen_struct_from_schema(params_schema)
    type_defs.append(TypeDefinition(type_name=type_name, schema=params_schema))
    return type_defs


def generate_type_defs_for_operation(op: OperationDefinition) -> list[TypeDefinition]:
    """Return the params object and every helper type an operation needs."""
    type_defs: list[TypeDefinition] = []
    if op.params():
        type_defs.extend(generate_params_types(op))
    for param in op.all_params():
        type_defs.extend(param.schema.get_additional_type_defs())
    for body in op.bodies:
        type_defs.extend(body.schema.get_additional_type_defs())
    return type_defs


def _operation_definition(
    document: Document,
    request_path: str,
    op_name: str,
    operation: Operation,
    global_params: Sequence[ParameterDefinition],
) -> OperationDefinition:
    if operation.operation_id:
        operation_id = to_camel_case(operation.operation_id)
    else:
        try:
            operation_id = generate_default_operation_id(op_name, request_path)
        except CodegenError as exc:
            raise CodegenError(
                f"error generating default OperationID for {op_name}/{request_path}: {exc}"
            ) from exc
    operation.operation_id = operation_id

    try:
        local_params = describe_parameters(operation.parameters, [operation_id + "Params"])
    except CodegenError as exc:
        raise CodegenError(f"error describing global parameters for {op_name}/{request_path}: {exc}") from exc
    all_params = [*global_params, *local_params]

    path_params = sort_params_by_path(
        request_path, filter_parameter_definitions_by_type(all_params, "path")
    )

    try:
        bodies, body_types = generate_body_definitions(operation_id, operation.request_body)
    except CodegenError as exc:
        raise CodegenError(f"error generating body definitions: {exc}") from exc
    try:
        responses = generate_response_definitions(operation_id, operation.responses)
    except CodegenError as exc:
        raise CodegenError(f"error generating response definitions: {exc}") from exc

    security = operation.security if operation.security is not None else document.security
    definition = OperationDefinition(
        operation_id=operation_id,
        path_params=path_params,
        header_params=filter_parameter_definitions_by_type(all_params, "header"),
        query_params=filter_parameter_definitions_by_type(all_params, "query"),
        cookie_params=filter_parameter_definitions_by_type(all_params, "cookie"),
        summary=operation.summary or "",
        method=op_name,
        path=request_path,
        spec=operation,
        bodies=bodies,
        responses=responses,
        type_definitions=list(body_types),
        security_definitions=describe_security_definition(security or []),
    )
    if operation.request_body is not None and operation.request_body.value is not None:
        definition.body_required = operation.request_body.value.required
    definition.type_definitions.extend(generate_type_defs_for_operation(definition))
    return definition


def operation_definitions(document: Document) -> list[OperationDefinition]:
    """Describe every operation of ``document``, ordered by path and method."""
    result: list[OperationDefinition] = []
    for request_path in sorted_keys(document.paths):
        path_item = document.paths[request_path]
        try:
            global_params = describe_parameters(path_item.parameters, None)
        except CodegenError as exc:
            raise CodegenError(f"error describing global parameters for {request_path}: {exc}") from exc
        operations = path_item.operations()
        for op_name in sorted_keys(operations):
            result.append(
                _operation_definition(document, request_path, op_name, operations[op_name], global_params)
            )
    return result
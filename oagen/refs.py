"""Resolution of ``$ref`` strings to Go type names."""

from __future__ import annotations

from typing import Any

from .names import schema_name_to_type_name
from .spec import CodegenError, Document, Ref, current_state

EXT_GO_NAME = "x-go-name"

# Component kinds whose entries may be renamed through ``x-go-name``, mapped
# to the attribute of :class:`Components` that holds them.
_RENAMABLE_KINDS = {
    "schemas": "schemas",
    "parameters": "parameters",
    "responses": "responses",
    "requestBodies": "request_bodies",
}


def is_whole_document_reference(ref: str) -> bool:
    """Report whether ``ref`` points at a whole document, with no ``#`` fragment."""
    return bool(ref) and "#" not in ref


def is_go_type_reference(ref: str) -> bool:
    """Report whether ``ref`` can be turned into a Go type name."""
    return bool(ref) and not is_whole_document_reference(ref)


def _ext_type_name(value: Any) -> str:
    if not isinstance(value, str):
        raise CodegenError(f"invalid value for {EXT_GO_NAME!r}: expected a string, got {value!r}")
    return value


def _rename(name: str, ref: Ref) -> str:
    """Return the Go name of a component, honouring ``x-go-name``."""
    if ref.ref or ref.value is None:
        return schema_name_to_type_name(name)
    extensions = getattr(ref.value, "extensions", None) or {}
    if EXT_GO_NAME in extensions:
        return _ext_type_name(extensions[EXT_GO_NAME])
    return schema_name_to_type_name(name)


def find_schema_name_by_ref_path(ref_path: str, document: Document | None) -> str:
    """Return the Go name of the local component ``ref_path`` points at.

    An empty string is returned when the path is not a local component
    reference or the component is not in ``document``.
    """
    parts = ref_path.split("/")
    if len(parts) != 4 or parts[0] != "#" or parts[1] != "components":
        return ""
    if document is None:
        return ""
    attribute = _RENAMABLE_KINDS.get(parts[2])
    if attribute is None:
        return ""
    name = parts[3]
    target = getattr(document.components, attribute).get(name)
    if target is None:
        return ""
    return _rename(name, target)


def _ref_path_to_go_type(ref_path: str, local: bool) -> str:
    if not ref_path:
        raise CodegenError("empty reference path")
    state = current_state()
    if ref_path.startswith("#"):
        parts = ref_path.split("/")
        depth = len(parts)
        allowed = (4,) if local else (4, 2)
        if depth not in allowed:
            raise CodegenError(
                f"unexpected reference depth: {depth} for ref: {ref_path} local: {str(local).lower()}"
            )
        try:
            name = find_schema_name_by_ref_path(ref_path, state.spec)
        except CodegenError as exc:
            raise CodegenError(f"error finding ref: {ref_path} in spec: {exc}") from exc
        if name:
            return name
        return schema_name_to_type_name(parts[-1])

    parts = ref_path.split("#")
    if len(parts) != 2:
        raise CodegenError(f"unsupported reference: {ref_path}")
    remote, fragment = parts
    package = state.import_mapping.get(remote)
    if package is None:
        raise CodegenError(
            f"unrecognized external reference '{remote}'; please provide the known import "
            "for this reference using option --import-mapping"
        )
    return f"{package}.{_ref_path_to_go_type('#' + fragment, False)}"


def ref_path_to_go_type(ref_path: str) -> str:
    """Convert a ``$ref`` value to a Go type name.

    ``#/components/schemas/Foo`` becomes ``Foo``; references into other
    documents are qualified with the package name from the import mapping.
    """
    return _ref_path_to_go_type(ref_path, True)
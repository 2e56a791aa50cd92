# oagen

`oagen` reads an OpenAPI 3 document and describes it in the terms a Go code
generator needs: type names, struct bodies, field tags, parameters, request
bodies and responses. It also merges `allOf` schemas into one.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Loading a document

```python
from oagen.spec import load_document

with open("api.yaml") as handle:
    document = load_document(handle.read())
```

`load_document` accepts YAML or JSON text, bytes, or an already parsed
mapping, and raises `CodegenError` when the input is not a valid document or
a local `$ref` cannot be resolved. The `Document` it returns holds `paths`,
`components` and `security` as plain Python objects: `PathItem`,
`Operation`, `Parameter`, `RequestBody`, `Response`, `MediaType`, `OASchema`
and so on. Each reference is a `Ref`, which carries the `$ref` string and
the resolved value; references into other documents keep `value` as `None`.

## Generator state

Settings for a run live in a `GeneratorState`: `CompatibilityOptions`, the
document being processed (`spec`) and an `import_mapping` from external
document paths to Go package names. Install one for a block with
`use_state` and read the active one with `current_state()`:

```python
from oagen.spec import GeneratorState, use_state

with use_state(GeneratorState(spec=document)):
    ...
```

The document in the state is what lets `$ref`s to components renamed with
`x-go-name` resolve to their new names.

## Describing operations

```python
from oagen.operations import operation_definitions

for op in operation_definitions(document):
    print(op.method, op.path, op.operation_id)
    for param in op.all_params():
        print("   ", param.go_variable_name(), param.type_def())
```

Each `OperationDefinition` gives its path, query, header and cookie
parameters (`ParameterDefinition`), its request bodies
(`RequestBodyDefinition`), its responses (`ResponseDefinition`), its
security requirements (`SecurityDefinition`) and the extra
`TypeDefinition`s that generated code has to declare. Operations without an
`operationId` get one from the method and path, e.g. `GetV1FooBar`.

## Schemas to Go types

```python
from oagen.gotypes import generate_go_schema
from oagen.fields import gen_struct_from_schema

go_schema = generate_go_schema(document.components.schemas["Pet"], ["Pet"])
print(go_schema.type_decl())
print(gen_struct_from_schema(go_schema))
```

`generate_go_schema` returns a `GoSchema`; `gen_fields_from_properties`
renders struct fields with their `json`/`form` tags.
`oagen.gotypes.merge_schemas` describes the Go type for an `allOf` list. The
lower level `oagen.merge.merge_openapi_schemas` merges two `OASchema` values
and raises `MergeError` when they conflict.

## Naming helpers

`oagen.names` holds the string helpers the generator is built on:

- `to_camel_case`, `schema_name_to_type_name` and `sanitize_go_identity`
  produce Go identifiers.
- `swagger_uri_to_echo_uri`, `swagger_uri_to_chi_uri`,
  `swagger_uri_to_gin_uri` and `swagger_uri_to_gorilla_uri` rewrite route
  paths for each router.
- `string_to_go_comment` renders text as a Go comment.

```python
from oagen.names import to_camel_case, swagger_uri_to_echo_uri

to_camel_case("number-1234")               # "Number1234"
swagger_uri_to_echo_uri("/path/{.arg*}")    # "/path/:arg"
```

`oagen.refs.ref_path_to_go_type` turns `$ref` paths into Go type names.

## What it does not do

`oagen` stops at describing the document. It does not write Go source files:
there are no templates for servers, clients or embedded specs, and no
command-line tool. It also does not remove unused components from a
document; everything under `components` is kept as loaded.
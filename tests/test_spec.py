import pytest

from oagen.spec import (
    CodegenError,
    CompatibilityOptions,
    Document,
    GeneratorState,
    OASchema,
    Operation,
    PathItem,
    current_state,
    load_document,
    use_state,
)

FIXTURE = """
openapi: 3.0.1
info:
  title: Test
  version: 1.0.0
paths:
  /pets/{id}:
    parameters:
      - $ref: '#/components/parameters/idParam'
    get:
      operationId: getPet
      tags: [pets]
      responses:
        200:
          description: ok
          content:
            application/json:
              schema:
                $ref: '#/components/schemas/Pet'
    post:
      operationId: updatePet
      security: []
      requestBody:
        $ref: '#/components/requestBodies/PetBody'
      responses:
        default:
          description: error
components:
  schemas:
    Pet:
      type: object
      required: [name]
      properties:
        name:
          type: string
        tags:
          type: array
          items:
            type: string
      additionalProperties: false
      x-go-name: Animal
    Alias:
      $ref: '#/components/schemas/Pet'
    Dict:
      type: object
      additionalProperties:
        type: integer
    External:
      $ref: 'other.yaml#/components/schemas/Thing'
  parameters:
    idParam:
      name: id
      in: path
      required: true
      schema:
        type: string
  requestBodies:
    PetBody:
      required: true
      content:
        application/json:
          schema:
            $ref: '#/components/schemas/Alias'
"""


@pytest.fixture
def document():
    return load_document(FIXTURE)


def test_local_reference_points_at_component(document):
    op = document.paths["/pets/{id}"].get
    schema_ref = op.responses["200"].value.content["application/json"].schema
    assert schema_ref.ref == "#/components/schemas/Pet"
    assert schema_ref.value is document.components.schemas["Pet"].value


def test_chained_reference_resolves_to_final_value(document):
    pet = document.components.schemas["Pet"].value
    assert document.components.schemas["Alias"].value is pet
    body = document.paths["/pets/{id}"].post.request_body.value
    assert body.content["application/json"].schema.value is pet


def test_external_reference_is_left_unresolved(document):
    external = document.components.schemas["External"]
    assert external.ref == "other.yaml#/components/schemas/Thing"
    assert external.value is None


def test_schema_fields(document):
    pet = document.components.schemas["Pet"].value
    assert pet.type == "object"
    assert pet.required == ["name"]
    assert sorted(pet.properties) == ["name", "tags"]
    assert pet.properties["tags"].value.items.value.type == "string"
    assert pet.additional_properties_allowed is False
    assert pet.additional_properties is None
    assert pet.extensions == {"x-go-name": "Animal"}


def test_additional_properties_schema(document):
    dictionary = document.components.schemas["Dict"].value
    assert dictionary.additional_properties_allowed is None
    assert dictionary.additional_properties.value.type == "integer"


def test_response_keys_are_strings(document):
    op = document.paths["/pets/{id}"].get
    assert list(op.responses) == ["200"]


def test_operations_keyed_by_method(document):
    item = document.paths["/pets/{id}"]
    ops = item.operations()
    assert set(ops) == {"GET", "POST"}
    assert ops["GET"].operation_id == "getPet"


def test_path_item_without_operations():
    assert PathItem().operations() == {}
    assert PathItem(put=Operation(operation_id="x")).operations()["PUT"].operation_id == "x"


def test_security_absent_versus_empty(document):
    item = document.paths["/pets/{id}"]
    assert item.get.security is None
    assert item.post.security == []


def test_parameter_fields(document):
    param_ref = document.paths["/pets/{id}"].parameters[0]
    assert param_ref.value is document.components.parameters["idParam"].value
    param = param_ref.value
    assert param.name == "id"
    assert param.location == "path"
    assert param.required is True
    assert param.explode is None


def test_load_from_mapping_and_bytes_agree():
    data = {"openapi": "3.0.0", "paths": {"/a": {"get": {"operationId": "a"}}}}
    from_mapping = load_document(data)
    from_bytes = load_document(b"openapi: 3.0.0\npaths:\n  /a:\n    get:\n      operationId: a\n")
    assert from_mapping.paths["/a"].get == from_bytes.paths["/a"].get


def test_unresolved_local_reference_raises():
    text = "openapi: 3.0.0\ncomponents:\n  schemas:\n    A:\n      $ref: '#/components/schemas/Missing'\n"
    with pytest.raises(CodegenError):
        load_document(text)


def test_circular_reference_raises():
    text = (
        "openapi: 3.0.0\ncomponents:\n  schemas:\n"
        "    A:\n      $ref: '#/components/schemas/B'\n"
        "    B:\n      $ref: '#/components/schemas/A'\n"
    )
    with pytest.raises(CodegenError):
        load_document(text)


def test_non_mapping_document_raises():
    with pytest.raises(CodegenError):
        load_document("- just\n- a list\n")


def test_invalid_yaml_raises():
    with pytest.raises(CodegenError):
        load_document("openapi: [unclosed")


def test_wrong_field_type_raises():
    with pytest.raises(CodegenError):
        load_document({"components": {"schemas": {"A": {"type": ["string"]}}}})


def test_use_state_restores_previous_state():
    before = current_state()
    state = GeneratorState(compatibility=CompatibilityOptions(old_merge_schemas=True))
    with use_state(state) as active:
        assert active is state
        assert current_state() is state
        assert current_state().compatibility.old_merge_schemas is True
    assert current_state() is before


def test_state_defaults():
    state = GeneratorState()
    assert state.import_mapping == {}
    assert state.spec == Document()
    assert state.compatibility.old_aliasing is False


def test_schema_defaults_are_independent():
    first, second = OASchema(), OASchema()
    first.required.append("x")
    assert second.required == []
import pytest

from oagen.params import (
    ParameterDefinition,
    SecurityDefinition,
    describe_parameters,
    describe_security_definition,
    filter_parameter_definitions_by_type,
    find_parameter_by_name,
    sort_params_by_path,
)
from oagen.spec import CodegenError, GeneratorState, Parameter, Ref, load_document, use_state
from oagen.types import GoSchema

SPEC = """
openapi: 3.0.1
info:
  title: Test
  version: 1.0.0
paths:
  /users/{user_id}/items/{item_id}:
    parameters:
      - name: item_id
        in: path
        required: true
        schema:
          type: integer
      - name: user_id
        in: path
        required: true
        schema:
          type: string
      - $ref: '#/components/parameters/limitParam'
    get:
      operationId: listItems
      responses:
        '200':
          description: ok
components:
  parameters:
    limitParam:
      name: limit
      in: query
      schema:
        type: integer
"""


def _definition(name="p", location="query", required=False, **spec_fields):
    spec = Parameter(name=name, location=location, required=required, **spec_fields)
    return ParameterDefinition(param_name=name, location=location, required=required, spec=spec)


@pytest.fixture
def path_params():
    document = load_document(SPEC)
    with use_state(GeneratorState(spec=document)):
        item = document.paths["/users/{user_id}/items/{item_id}"]
        yield describe_parameters(item.parameters, None)


@pytest.mark.parametrize(
    "media_types, want",
    [
        ([], False),
        (["application/pdf"], False),
        (["application/pdf", "application/json"], False),
        (["application/notjson"], False),
        (["application/json"], True),
        (["application/json-patch+json"], True),
        (["application/vnd.api+json"], True),
    ],
)
def test_is_json(media_types, want):
    pd = _definition(content={media_type: None for media_type in media_types})
    assert pd.is_json() is want


@pytest.mark.parametrize(
    "media_types, want",
    [
        ([], False),
        (["application/json"], False),
        (["application/pdf"], True),
        (["application/pdf", "application/json"], True),
    ],
)
def test_is_pass_through(media_types, want):
    pd = _definition(content={media_type: None for media_type in media_types})
    assert pd.is_pass_through() is want


@pytest.mark.parametrize(
    "location, style, explode",
    [("path", "simple", False), ("header", "simple", False), ("query", "form", True), ("cookie", "form", True)],
)
def test_style_and_explode_defaults(location, style, explode):
    pd = _definition(location=location)
    assert pd.style() == style
    assert pd.explode() is explode


def test_explicit_style_and_explode():
    pd = _definition(location="query", style="deepObject", explode=False)
    assert pd.style() == "deepObject"
    assert pd.explode() is False


def test_unknown_location_raises():
    pd = _definition(location="body")
    with pytest.raises(CodegenError):
        pd.style()
    with pytest.raises(CodegenError):
        pd.explode()


def test_json_tag():
    assert _definition("id", required=True).json_tag() == '`json:"id"`'
    assert _definition("id").json_tag() == '`json:"id,omitempty"`'


def test_go_names():
    pd = _definition("user_id")
    assert pd.go_name() == "UserId"
    assert pd.go_variable_name() == "userId"


def test_go_variable_name_avoids_keywords():
    assert _definition("type").go_variable_name() == "pType"


def test_go_name_extension():
    pd = _definition("user_id", extensions={"x-go-name": "owner"})
    assert pd.go_name() == "Owner"


def test_is_styled_and_indirect_optional():
    pd = _definition(schema=Ref(value=None))
    assert pd.is_styled() is True
    assert _definition().is_styled() is False
    assert _definition().indirect_optional() is True
    assert _definition(required=True).indirect_optional() is False
    skip = _definition()
    skip.schema = GoSchema(go_type="json.RawMessage", skip_optional_pointer=True)
    assert skip.indirect_optional() is False


def test_describe_parameters(path_params):
    by_name = {p.param_name: p for p in path_params}
    assert [p.param_name for p in path_params] == ["item_id", "user_id", "limit"]
    assert by_name["item_id"].type_def() == "int"
    assert by_name["user_id"].type_def() == "string"
    assert by_name["limit"].type_def() == "LimitParam"
    assert by_name["limit"].location == "query"


def test_describe_parameters_without_schema():
    params = [Ref(value=Parameter(name="bad", location="query"))]
    with pytest.raises(CodegenError, match="bad"):
        describe_parameters(params, [])


def test_filter_and_sort(path_params):
    in_path = filter_parameter_definitions_by_type(path_params, "path")
    assert [p.param_name for p in in_path] == ["item_id", "user_id"]
    ordered = sort_params_by_path("/users/{user_id}/items/{item_id}", in_path)
    assert [p.param_name for p in ordered] == ["user_id", "item_id"]


def test_sort_params_count_mismatch(path_params):
    in_path = filter_parameter_definitions_by_type(path_params, "path")
    with pytest.raises(CodegenError, match="positional parameters"):
        sort_params_by_path("/users/{user_id}", in_path)


def test_sort_params_unknown_name(path_params):
    in_path = filter_parameter_definitions_by_type(path_params, "path")
    with pytest.raises(CodegenError, match="doesn't exist"):
        sort_params_by_path("/users/{owner}/items/{item_id}", in_path)


def test_find_parameter_by_name():
    params = [_definition("a"), _definition("b")]
    assert find_parameter_by_name(params, "b").param_name == "b"
    assert find_parameter_by_name(params, "c") is None


def test_describe_security_definition():
    result = describe_security_definition([{"oauth": ["read"], "apiKey": []}, {"basic": []}])
    assert result == [
        SecurityDefinition(provider_name="apiKey", scopes=[]),
        SecurityDefinition(provider_name="oauth", scopes=["read"]),
        SecurityDefinition(provider_name="basic", scopes=[]),
    ]
import pytest

from oagen.names import (
    escape_path_elements,
    is_go_identity,
    is_go_keyword,
    is_predeclared_go_identifier,
    is_valid_go_identity,
    lowercase_first_character,
    ordered_params_from_uri,
    path_to_type_name,
    replace_path_params_with_str,
    sanitize_enum_names,
    sanitize_go_identity,
    schema_has_additional_properties,
    schema_name_to_type_name,
    sorted_keys,
    string_to_go_comment,
    string_with_type_name_to_go_comment,
    swagger_uri_to_chi_uri,
    swagger_uri_to_echo_uri,
    swagger_uri_to_gin_uri,
    swagger_uri_to_gorilla_uri,
    to_camel_case,
    uppercase_first_character,
)
from oagen.spec import OASchema, Ref


def test_camel_case_substitutions():
    assert (
        to_camel_case("word.word-WORD+Word_word~word(Word)Word{Word}Word[Word]Word:Word;")
        == "WordWordWORDWordWordWordWordWordWordWordWordWordWord"
    )


def test_camel_case_numbers():
    assert to_camel_case("number-1234") == "Number1234"


def test_camel_case_trims_spaces():
    assert to_camel_case(" hello world ") == "HelloWorld"


def test_sorted_keys():
    mapping = {"f": None, "c": None, "b": None, "e": None, "d": None, "a": None}
    assert sorted_keys(mapping) == ["a", "b", "c", "d", "e", "f"]


def test_first_character_case():
    assert uppercase_first_character("hello") == "Hello"
    assert lowercase_first_character("Hello") == "hello"
    assert uppercase_first_character("") == ""
    assert lowercase_first_character("") == ""


URI_CASES = [
    ("/path/{arg}/foo",),
    ("/path/{arg*}/foo",),
    ("/path/{.arg}/foo",),
    ("/path/{.arg*}/foo",),
    ("/path/{;arg}/foo",),
    ("/path/{;arg*}/foo",),
    ("/path/{?arg}/foo",),
    ("/path/{?arg*}/foo",),
]


@pytest.mark.parametrize("convert", [swagger_uri_to_echo_uri, swagger_uri_to_gin_uri])
def test_colon_style_uris(convert):
    assert convert("/path") == "/path"
    assert convert("/path/{arg}") == "/path/:arg"
    assert convert("/path/{arg1}/{arg2}") == "/path/:arg1/:arg2"
    assert convert("/path/{arg1}/{arg2}/foo") == "/path/:arg1/:arg2/foo"
    for (uri,) in URI_CASES:
        assert convert(uri) == "/path/:arg/foo"


@pytest.mark.parametrize("convert", [swagger_uri_to_gorilla_uri, swagger_uri_to_chi_uri])
def test_brace_style_uris(convert):
    assert convert("/path") == "/path"
    assert convert("/path/{arg}") == "/path/{arg}"
    assert convert("/path/{arg1}/{arg2}") == "/path/{arg1}/{arg2}"
    assert convert("/path/{arg1}/{arg2}/foo") == "/path/{arg1}/{arg2}/foo"
    for (uri,) in URI_CASES:
        assert convert(uri) == "/path/{arg}/foo"


def test_ordered_params_from_uri():
    assert ordered_params_from_uri("/path/{param1}/{.param2}/{;param3*}/foo") == [
        "param1",
        "param2",
        "param3",
    ]
    assert ordered_params_from_uri("/path/foo") == []


def test_replace_path_params_with_str():
    assert replace_path_params_with_str("/path/{param1}/{.param2}/{;param3*}/foo") == "/path/%s/%s/%s/foo"


MULTI_LINE = "Multi\nLine\n  With\n    Spaces\n\tAnd\n\t\tTabs\n"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", ""),
        (" ", ""),
        ("Single Line", "// Single Line"),
        ("    Single Line", "//     Single Line"),
        (MULTI_LINE, "// Multi\n// Line\n//   With\n//     Spaces\n// \tAnd\n// \t\tTabs"),
    ],
)
def test_string_to_go_comment(text, expected):
    assert string_to_go_comment(text) == expected


@pytest.mark.parametrize(
    "text, name, expected",
    [
        ("", "", ""),
        (" ", "", ""),
        ("Single Line", "SingleLine", "// SingleLine Single Line"),
        ("    Single Line", "SingleLine", "// SingleLine     Single Line"),
        (
            MULTI_LINE,
            "MultiLine",
            "// MultiLine Multi\n// Line\n//   With\n//     Spaces\n// \tAnd\n// \t\tTabs",
        ),
    ],
)
def test_string_with_type_name_to_go_comment(text, name, expected):
    assert string_with_type_name_to_go_comment(text, name) == expected


def test_escape_path_elements():
    assert escape_path_elements("/foo/bar/baz") == "/foo/bar/baz"
    assert escape_path_elements("foo/bar/baz") == "foo/bar/baz"
    assert escape_path_elements("/foo/bar:baz") == "/foo/bar%3Abaz"
    assert escape_path_elements("/foo/{bar:baz}") == "/foo/{bar:baz}"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("$", "DollarSign"),
        ("$ref", "Ref"),
        ("no_prefix~+-", "NoPrefix"),
        ("123", "N123"),
        ("-1", "Minus1"),
        ("+1", "Plus1"),
        ("@timestamp,", "Timestamp"),
        ("&now", "AndNow"),
        ("~", "Tilde"),
        ("_foo", "Foo"),
        ("=3", "Equal3"),
        ("#Tag", "HashTag"),
        (".com", "DotCom"),
        ("", "Empty"),
    ],
)
def test_schema_name_to_type_name(name, expected):
    assert schema_name_to_type_name(name) == expected


def test_keywords_and_predeclared():
    assert is_go_keyword("struct") is True
    assert is_go_keyword("int") is False
    assert is_predeclared_go_identifier("int") is True
    assert is_predeclared_go_identifier("struct") is False


def test_go_identity_checks():
    assert is_go_identity("break") is True
    assert is_go_identity("foo") is False
    assert is_go_identity("1foo") is False
    assert is_valid_go_identity("foo") is True
    assert is_valid_go_identity("int") is False
    assert is_valid_go_identity("break") is False


@pytest.mark.parametrize(
    "text, expected",
    [("break", "_break"), ("int", "_int"), ("a-b", "a_b"), ("9lives", "_lives"), ("Foo", "Foo")],
)
def test_sanitize_go_identity(text, expected):
    result = sanitize_go_identity(text)
    assert result == expected
    assert is_valid_go_identity(result)


def test_sanitize_enum_names_dedupes_and_numbers_collisions():
    result = sanitize_enum_names(["foo", "foo", "Foo", "bar baz"])
    assert result == {"Foo": "foo", "Foo1": "Foo", "BarBaz": "bar baz"}


def test_sanitize_enum_names_values_preserved():
    names = ["car", "dog", "oldage", "1", ""]
    result = sanitize_enum_names(names)
    assert sorted(result.values()) == sorted(names)
    assert all(is_valid_go_identity(key) for key in result)


def test_schema_has_additional_properties():
    assert schema_has_additional_properties(OASchema()) is False
    assert schema_has_additional_properties(OASchema(additional_properties_allowed=False)) is False
    assert schema_has_additional_properties(OASchema(additional_properties_allowed=True)) is True
    assert schema_has_additional_properties(OASchema(additional_properties=Ref(value=OASchema()))) is True


def test_path_to_type_name_does_not_mutate():
    path = ["object", "field_one", "nested"]
    assert path_to_type_name(path) == "Object_FieldOne_Nested"
    assert path == ["object", "field_one", "nested"]
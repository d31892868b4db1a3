import pytest

from srcdigest.declarations import Declaration
from srcdigest.parsers import CSharpParser, ParseError, PythonParser, build_parser


def _flatten(declarations: list[Declaration]) -> list[tuple[str, str]]:
    flat: list[tuple[str, str]] = []
    for declaration in declarations:
        flat.append((declaration.kind, declaration.identifier))
        flat.extend(_flatten(list(declaration.children)))
    return flat


def test_ph1_parse_001_python_parser_maps_module_declarations() -> None:
    source = (
        "from dataclasses import dataclass\n"
        "from typing import Protocol\n"
        "\n"
        "LIMIT: int = 3\n"
        "\n"
        "class Store(Protocol):\n"
        "    def load(self) -> str: ...\n"
        "\n"
        "@dataclass\n"
        "class Point:\n"
        "    x: int\n"
        "    y: int = 0\n"
        "\n"
        "class Service:\n"
        "    count = 0\n"
        "\n"
        "    @property\n"
        "    def name(self) -> str:\n"
        "        return 'svc'\n"
        "\n"
        "    @name.setter\n"
        "    def name(self, value):\n"
        "        pass\n"
        "\n"
        "    def run(self):\n"
        "        def helper():\n"
        "            return 1\n"
        "        return helper()\n"
    )

    declarations = PythonParser().parse(source)

    assert _flatten(declarations) == [
        ("field", "LIMIT"),
        ("interface", "Store"),
        ("method", "load"),
        ("struct", "Point"),
        ("field", "x"),
        ("field", "y"),
        ("class", "Service"),
        ("field", "count"),
        ("property", "name"),
        ("method", "run"),
    ]


def test_ph1_parse_002_python_method_source_includes_decorators_and_body() -> None:
    source = (
        "import functools\n"
        "\n"
        "@functools.cache\n"
        "def compute(value):\n"
        "    return value * 2\n"
        "\n"
        "OTHER = 1\n"
    )

    declarations = PythonParser().parse(source)

    method = declarations[0]
    assert method.kind == "method"
    assert method.source_text == (
        "@functools.cache\ndef compute(value):\n    return value * 2"
    )


def test_ph1_parse_003_python_fields_carry_types_and_variables() -> None:
    source = "a, b = 1, 2\nname: str = 'x'\n"

    declarations = PythonParser().parse(source)

    assert declarations[0].variables == ("a", "b")
    assert declarations[0].declared_type == "Any"
    assert declarations[1].variables == ("name",)
    assert declarations[1].declared_type == "str"


def test_ph1_parse_004_python_syntax_error_raises_parse_error() -> None:
    with pytest.raises(ParseError):
        PythonParser().parse("def broken(:\n    pass\n")


def test_ph1_parse_005_csharp_parser_maps_namespace_members() -> None:
    source = (
        "namespace App.Core\n"
        "{\n"
        "    public class Service\n"
        "    {\n"
        "        private int a, b, c;\n"
        "        public string Name { get; set; }\n"
        "        public int Add(int x, int y)\n"
        "        {\n"
        "            return x + y;\n"
        "        }\n"
        "    }\n"
        "\n"
        "    public interface IService\n"
        "    {\n"
        "        void Stop();\n"
        "    }\n"
        "}\n"
    )

    declarations = CSharpParser().parse(source)

    assert len(declarations) == 1
    namespace = declarations[0]
    assert (namespace.kind, namespace.identifier) == ("namespace", "App.Core")
    service, interface = namespace.children
    assert (service.kind, service.identifier) == ("class", "Service")
    field, prop, method = service.children
    assert field.kind == "field"
    assert field.variables == ("a", "b", "c")
    assert field.declared_type == "int"
    assert (prop.kind, prop.identifier, prop.declared_type) == (
        "property",
        "Name",
        "string",
    )
    assert (method.kind, method.identifier) == ("method", "Add")
    assert method.source_text is not None
    assert method.source_text.startswith("public int Add(int x, int y)")
    assert "return x + y;" in method.source_text
    assert (interface.kind, interface.identifier) == ("interface", "IService")
    assert [(child.kind, child.identifier) for child in interface.children] == [
        ("method", "Stop")
    ]


def test_ph1_parse_006_csharp_unmodeled_declarations_become_other() -> None:
    source = (
        "public enum Color { Red, Green }\n"
        "public struct Point\n"
        "{\n"
        "    public Point(int x) { X = x; }\n"
        "    public int X;\n"
        "}\n"
    )

    declarations = CSharpParser().parse(source)

    color, point = declarations
    assert (color.kind, color.identifier, color.raw_kind) == (
        "other",
        "Color",
        "enum_declaration",
    )
    assert point.kind == "struct"
    assert [child.kind for child in point.children] == ["other", "field"]
    assert point.children[0].raw_kind == "constructor_declaration"


def test_ph1_parse_007_csharp_file_scoped_namespace_owns_following_types() -> None:
    source = (
        "namespace App;\n"
        "\n"
        "public class First { }\n"
        "public class Second { }\n"
    )

    declarations = CSharpParser().parse(source)

    assert len(declarations) == 1
    assert declarations[0].kind == "namespace"
    assert declarations[0].identifier == "App"
    assert [child.identifier for child in declarations[0].children] == [
        "First",
        "Second",
    ]


def test_ph1_parse_008_csharp_syntax_error_raises_parse_error() -> None:
    with pytest.raises(ParseError):
        CSharpParser().parse("public class Broken { void Run( { }\n")


def test_ph1_parse_009_build_parser_selects_language() -> None:
    assert build_parser("csharp").suffixes == (".cs",)
    assert build_parser("python").suffixes == (".py",)
    with pytest.raises(ValueError):
        build_parser("cobol")  # type: ignore[arg-type]


def test_ph1_parse_010_python_declarations_inside_blocks_are_kept() -> None:
    source = (
        "from typing import TYPE_CHECKING\n"
        "\n"
        "if TYPE_CHECKING:\n"
        "    from os import PathLike\n"
        "    Alias = PathLike\n"
        "else:\n"
        "    Alias = str\n"
        "\n"
        "try:\n"
        "    import fastjson as json\n"
        "except ImportError:\n"
        "    def loads(text):\n"
        "        return text\n"
        "finally:\n"
        "    READY: bool = True\n"
        "\n"
        "class Handler:\n"
        "    with open(__file__) as handle:\n"
        "        header = handle.readline()\n"
        "\n"
        "match 1:\n"
        "    case 1:\n"
        "        def matched():\n"
        "            pass\n"
        "\n"
        "if True:\n"
        "    def f():\n"
        "        pass\n"
        "import os\n"
        "x: int\n"
    )

    declarations = PythonParser().parse(source)

    assert _flatten(declarations) == [
        ("field", "Alias"),
        ("field", "Alias"),
        ("method", "loads"),
        ("field", "READY"),
        ("class", "Handler"),
        ("field", "header"),
        ("method", "matched"),
        ("method", "f"),
        ("field", "x"),
    ]


def test_ph1_parse_011_csharp_event_field_is_named_by_its_variable() -> None:
    source = (
        "public class Button\n"
        "{\n"
        "    public event System.EventHandler Ev;\n"
        "}\n"
    )

    declarations = CSharpParser().parse(source)

    event = declarations[0].children[0]
    assert (event.kind, event.identifier, event.raw_kind) == (
        "other",
        "Ev",
        "event_field_declaration",
    )

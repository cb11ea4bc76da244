from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = str(Path(__file__).resolve().parents[1])
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tabletest_format.extractor import TableMatch, find_table_literals


JAVA_SOURCE = '''class CalculatorTest {

    @TableTest("""
    a|b
    c|d
    """)
    void add(int a, int b) {}
}
'''


def _contents(source: str) -> list[str]:
    return [m.content(source) for m in find_table_literals(source)]


def test_finds_text_block_of_annotation() -> None:
    matches = find_table_literals(JAVA_SOURCE)

    assert len(matches) == 1
    assert isinstance(matches[0], TableMatch)
    assert matches[0].content(JAVA_SOURCE) == "\n    a|b\n    c|d\n    "
    assert matches[0].base_indent(JAVA_SOURCE) == "    "


@pytest.mark.parametrize(
    "annotation",
    [
        '@TableTest("""',
        '@TableTest(value = """',
        '@TableTest(value="""',
        '@TableTest  (  """',
        '@org.tabletest.junit.TableTest("""',
        '@TableTest(\n        """',
        '@TableTest( /* table */ """',
    ],
)
def test_annotation_forms(annotation: str) -> None:
    source = f'class T {{\n    {annotation}\n    x|y\n    """)\n    void t() {{}}\n}}\n'

    assert _contents(source) == ["\n    x|y\n    "]


def test_multiple_annotations_in_source_order() -> None:
    source = (
        '@TableTest("""\na|b\n""")\nvoid one() {}\n'
        '@TableTest("""\nc|d\n""")\nvoid two() {}\n'
    )

    matches = find_table_literals(source)

    assert [m.content(source) for m in matches] == ["\na|b\n", "\nc|d\n"]
    assert matches[0].content_start < matches[1].content_start


@pytest.mark.parametrize(
    "source",
    [
        '/* @TableTest("""\na|b\n""") */\nclass T {}\n',
        '// @TableTest\nString s = """\na|b\n""";\n',
        'String s = "@TableTest(\\"\\"\\"";\nString t = """\na|b\n""";\n',
        '@TableTestSupport("""\na|b\n""")\nvoid t() {}\n',
        '@ParameterizedTest\n@CsvSource(textBlock = """\na|b\n""")\nvoid t() {}\n',
    ],
)
def test_ignores_blocks_not_passed_to_annotation(source: str) -> None:
    assert find_table_literals(source) == []


def test_annotation_without_arguments_does_not_claim_next_block() -> None:
    source = '@TableTest\n@Other("""\na|b\n""")\nvoid t() {}\n'

    assert find_table_literals(source) == []


def test_char_literal_with_quote_does_not_confuse_scanner() -> None:
    source = 'char q = \'"\';\n@TableTest("""\na|b\n""")\nvoid t() {}\n'

    assert _contents(source) == ["\na|b\n"]


def test_escaped_quotes_do_not_close_text_block() -> None:
    source = '@TableTest("""\na|b\\"""\nc|d\n""")\nvoid t() {}\n'

    contents = _contents(source)

    assert len(contents) == 1
    assert contents[0].endswith("c|d\n")


def test_tab_indentation_is_captured() -> None:
    source = 'class T {\n\t@TableTest("""\n\ta|b\n\t""")\n\tvoid t() {}\n}\n'

    matches = find_table_literals(source)

    assert matches[0].base_indent(source) == "\t"


def test_custom_annotation_name() -> None:
    source = '@Table("""\na|b\n""")\nvoid t() {}\n'

    assert find_table_literals(source) == []
    assert [m.content(source) for m in find_table_literals(source, "Table")] == ["\na|b\n"]


def test_unterminated_text_block_yields_nothing() -> None:
    assert find_table_literals('@TableTest("""\na|b\n') == []


def test_rejects_none() -> None:
    with pytest.raises(TypeError):
        find_table_literals(None)  # type: ignore[arg-type]

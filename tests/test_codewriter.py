import pytest

from splattrain.codewriter import CodeWriter


def test_empty_writer_is_empty():
    assert CodeWriter().string() == ""


def test_block_is_indented():
    writer = CodeWriter()
    writer.add_lines(["fn a() {", "b", "}"])
    assert writer.string() == "fn a() {\n    b\n}\n"


def test_nested_blocks_indent_by_depth():
    writer = CodeWriter()
    writer.add_lines(["mod m {", "fn f() {", "x", "}", "}"])
    lines = writer.string().splitlines()
    indents = [len(line) - len(line.lstrip(" ")) for line in lines]
    assert indents == [0, 4, 8, 4, 0]


def test_close_and_open_on_same_line():
    writer = CodeWriter()
    writer.add_lines(["if a {", "x", "} else {", "y", "}"])
    lines = writer.string().splitlines()
    assert lines[2] == "} else {"
    assert lines[3] == "    y"


def test_every_line_ends_with_newline():
    writer = CodeWriter()
    writer.add_lines(["a", "b", "c"])
    text = writer.string()
    assert text.count("\n") == 3
    assert text.endswith("\n")


def test_unbalanced_close_raises():
    writer = CodeWriter()
    with pytest.raises(ValueError):
        writer.add_line("}")


def test_str_matches_string():
    writer = CodeWriter()
    writer.add_line("line")
    assert str(writer) == writer.string()
import pytest
from pipeline import parse
from output import generate
from code_transformers import ConstantFolder

def fold(source):
    ast = parse(source)
    stats = ConstantFolder(ast).run()
    return generate(ast, source), stats["constants_folded"]

@pytest.mark.parametrize("source, expected, count", [
    ("x = 1 + 2 * 3;", "x = 7;", 2),
    ('x = "a" + "b" + 1;', 'x = "ab1";', 2),
    ('x = "n" + 1.5;', 'x = "n1.5";', 1),
    ("x = 0.1 + 0.2;", "x = 0.30000000000000004;", 1),
    ("x = 1 << 33;", "x = 2;", 1),
    ("x = 5 % 3;", "x = 2;", 1),
    ("x = 2 ** 3;", "x = 8;", 1),
    ("x = true + 1;", "x = 2;", 1),
    ("x = null + 1;", "x = 1;", 1),
    ("x = 1 / 0;", "x = Infinity;", 1),
    ("x = (0 - 1) / 0;", "x = -Infinity;", 2),
    ("x = 0 / (0 - 1);", "x = -0;", 2),
    ("x = 0 - 1;", "x = -1;", 1),
    ("x = 2 - (0 - 3);", "x = 5;", 2),
    ("x = a * (0 - 3);", "x = a * -3;", 1),
    ("x = (0 - 2) ** a;", "x = (0 - 2) ** a;", 0),
    ("x = (0 - 2) ** 2;", "x = (0 - 2) ** 2;", 0),
    ("x = (1 - 2 + 3) ** a;", "x = 2 ** a;", 2),
    ("x = (0 || 0 - 2) ** a;", "x = (0 || -2) ** a;", 1),
    ("x = (1 + 2).toString();", "x = (3).toString();", 1),
])
def test_fold(source, expected, count):
    assert fold(source) == (expected, count)

@pytest.mark.parametrize("source", [
    "x = 0 / 0;",
    'x = "a" - 1;',
    "x = a + 1 + 2;",
    "x = 1 === 1;",
    "x = /a/ + 1;",
])
def test_not_folded(source):
    assert fold(source) == (source, 0)

@pytest.mark.parametrize("source, expected", [
    ("x = 0 || y;", "x = y;"),
    ("x = 1 || y;", "x = 1;"),
    ("x = 1 && y;", "x = y;"),
    ('x = "" && y;', 'x = "";'),
    ("x = null || y();", "x = y();"),
])
def test_logical(source, expected):
    assert fold(source) == (expected, 1)

def test_logical_with_non_literal_left():
    assert fold("x = a || 1;") == ("x = a || 1;", 0)

def test_second_run_finds_nothing():
    code, count = fold('x = (1 + 2) * 3 + "px";')
    assert code == 'x = "9px";'
    assert count == 3
    assert fold(code)[1] == 0

def test_string_result_does_not_become_a_directive():
    code, count = fold('function f() { "use " + "strict"; return this; }')
    assert code == 'function f() {\n  ("use strict");\n  return this;\n}'
    assert count == 1
    assert parse(code).body[0].body.body[0].directive is None

import pytest
from pipeline import parse
from output import generate

def regenerate(source):
    return generate(parse(source), source)

@pytest.mark.parametrize("source", [
    "var a = 1;",
    "a = b + c * d;",
    "(a + b) * c;",
    "x = a - (b - c);",
    "x = - -y;",
    "x = typeof y;",
    "(1).toString();",
    "new (f())();",
    "x = a ? b : c;",
    "x = 'single';",
    "x = /ab+/g;",
    "x = `a${b}c`;",
    "x = [1, , 2];",
    "f(...args);",
    "x = async (a) => await a;",
    "x = (a, b);",
    "i++;",
    "--i;",
    "a.b[c](d);",
    "label: for (;;) {\n  break label;\n}",
])
def test_roundtrip(source):
    assert regenerate(source) == source

def test_if_else():
    assert regenerate("if (a) { b(); } else { c(); }") == "if (a) {\n  b();\n} else {\n  c();\n}"

def test_else_if_without_blocks():
    assert regenerate("if (a) b(); else if (c) d(); else e();") == "if (a)\n  b();\nelse if (c)\n  d();\nelse\n  e();"

def test_function():
    assert regenerate("function f(a, b) { return a; }") == "function f(a, b) {\n  return a;\n}"

def test_empty_function():
    assert regenerate("function f() {}") == "function f() {}"

def test_for():
    assert regenerate("for (var i = 0; i < 10; i++) { f(i); }") == "for (var i = 0; i < 10; i++) {\n  f(i);\n}"

def test_for_in():
    assert regenerate("for (var k in o) f(k);") == "for (var k in o)\n  f(k);"

def test_switch():
    source = "switch (a) { case 1: b(); break; default: c(); }"
    assert regenerate(source) == "switch (a) {\n  case 1:\n    b();\n    break;\n  default:\n    c();\n}"

def test_try():
    source = "try { a(); } catch (e) { b(); } finally { c(); }"
    assert regenerate(source) == "try {\n  a();\n} catch (e) {\n  b();\n} finally {\n  c();\n}"

def test_object():
    assert regenerate("x = {a: 1, b: [1, 2]};") == "x = {\n  a: 1,\n  b: [1, 2]\n};"

def test_arrow_returning_object():
    assert regenerate("f = () => ({a: 1});") == "f = () => ({\n  a: 1\n});"

def test_class():
    source = "class A extends B {\n  constructor() {\n    super();\n  }\n}"
    assert regenerate(source) == source

def test_line_comment():
    assert regenerate("// hello\nfoo();") == "// hello\nfoo();"

def test_comment_in_block():
    source = "function f() {\n  /* c */\n  return 1;\n}"
    assert regenerate(source) == source

def test_trailing_comment():
    assert regenerate("a();\n// end") == "a();\n// end"

def test_no_trailing_newline():
    assert not regenerate("a();\nb();\n").endswith("\n")

def test_regenerated_code_parses():
    source = "var o = {get x() { return 1; }, [k]: 2, m() {}}; ({}).x; (function () {})();"
    code = regenerate(source)
    assert generate(parse(code), code) == code

@pytest.mark.parametrize("source", [
    '"use strict";\nx = 1;',
    '("use strict");\nx = 1;',
    'function f() {\n  "a";\n  ("b");\n  return 1;\n}',
    'x = 1;\n"not a directive";',
])
def test_directive_prologue(source):
    assert regenerate(source) == source

from pipeline import parse
from output import generate
from code_transformers import IdentifierRenamer

def rename(source):
    ast = parse(source)
    stats = IdentifierRenamer(ast).run()
    return generate(ast, source), stats["identifiers_renamed"]

def test_local_binding_renamed():
    source = "var _0x1f2e = 1;\nfunction f() {\n  var _0x1f2e = 2;\n  return _0x1f2e + _0x1f2e;\n}"
    code, count = rename(source)
    assert code == "var _0x1f2e = 1;\nfunction f() {\n  var var_1 = 2;\n  return var_1 + var_1;\n}"
    assert count == 1

def test_generated_name_skips_existing_names():
    code, count = rename("function f(_0xa) { var var_1 = _0xa; return var_1; }")
    assert code == "function f(var_2) {\n  var var_1 = var_2;\n  return var_1;\n}"
    assert count == 1

def test_one_counter_for_all_scopes():
    code, count = rename("function f(_0xa, _0xb) { return _0xa + _0xb; } function g(_0xa) { return _0xa; }")
    assert code == "function f(var_1, var_2) {\n  return var_1 + var_2;\n}\nfunction g(var_3) {\n  return var_3;\n}"
    assert count == 3

def test_shorthand_property_keeps_its_key():
    code, count = rename("function f(_0xa) { return {_0xa}; }")
    assert code == "function f(var_1) {\n  return {\n    _0xa: var_1\n  };\n}"

def test_short_pattern():
    code, count = rename("function f() { var a_1 = 1; return a_1; }")
    assert code == "function f() {\n  var var_1 = 1;\n  return var_1;\n}"

def test_other_names_are_kept():
    source = "function f(abc) {\n  return abc;\n}"
    assert rename(source) == (source, 0)

def test_globals_are_kept():
    source = "function f() {\n  return _0xdead;\n}"
    assert rename(source) == (source, 0)

def test_nested_functions():
    code, count = rename("function f(_0xa) { return function (_0xb) { return _0xa + _0xb; }; }")
    assert code == "function f(var_1) {\n  return function(var_2) {\n    return var_1 + var_2;\n  };\n}"
    assert count == 2

def test_block_function_called_outside_its_block():
    source = "function f() { { function _0xg() { return 1; } } return _0xg(); }"
    code, count = rename(source)
    assert code == "function f() {\n  {\n    function var_1() {\n      return 1;\n    }\n  }\n  return var_1();\n}"
    assert count == 1

def test_block_function_of_the_program_is_global():
    source = "{\n  function _0xg() {}\n}\n_0xg();"
    assert rename(source) == (source, 0)

def test_block_function_in_strict_code_stays_in_its_block():
    code, count = rename('function f() { "use strict"; { function _0xg() {} _0xg(); } return _0xg; }')
    assert "function var_1() {}" in code
    assert "var_1();" in code
    assert "return _0xg;" in code
    assert count == 1

def test_block_function_redeclaring_a_var_is_kept():
    code, count = rename("function f() { var _0xg = 1; { function _0xg() {} } return _0xg; }")
    assert count == 0
    assert "return _0xg;" in code

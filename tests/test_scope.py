from pipeline import parse
from scope import analyze
from node_tools import get_ann

def test_function_scope():
    program = analyze(parse("var a = 1; function f(b) { var c = a + b; return c; }"))
    assert set(program.bindings) == {"a", "f"}
    fscope = program.children[0]
    assert fscope.kind == "function"
    assert set(fscope.bindings) == {"b", "c"}
    assert len(program.bindings["a"].references) == 1
    assert len(fscope.bindings["b"].references) == 1
    assert len(fscope.bindings["c"].references) == 1

def test_shadowing():
    program = analyze(parse("var x = 1; function g() { var x = 2; return x; } x;"))
    outer = program.bindings["x"]
    inner = program.children[0].bindings["x"]
    assert outer is not inner
    assert len(outer.references) == 1
    assert len(inner.references) == 1

def test_hoisting():
    program = analyze(parse("f(); function f() {}"))
    assert len(program.bindings["f"].references) == 1

def test_block_scope():
    program = analyze(parse("{ let y = 1; y; } var z;"))
    assert "y" not in program.bindings
    assert "z" in program.bindings
    block = program.children[0]
    assert block.kind == "block"
    assert len(block.bindings["y"].references) == 1

def test_var_in_block_is_function_scoped():
    program = analyze(parse("if (a) { var v = 1; }"))
    assert "v" in program.bindings

def test_catch_parameter():
    program = analyze(parse("try { a(); } catch (e) { e; }"))
    catch = [s for s in program.walk() if s.kind == "catch"][0]
    assert len(catch.bindings["e"].references) == 1

def test_unresolved_globals():
    ast = parse("foo(bar);")
    program = analyze(ast)
    call = ast.body[0].expression
    assert get_ann(call.callee, "binding") is None
    assert program.bindings == {}
    assert {"foo", "bar"} <= program.names

def test_written():
    program = analyze(parse("var a = []; a.push(1); var b = []; b[0] = 1; var c = []; c[0]; var d = 1; d = 2; var e = []; delete e[0];"))
    assert program.bindings["a"].is_written()
    assert program.bindings["b"].is_written()
    assert not program.bindings["c"].is_written()
    assert program.bindings["d"].is_written()
    assert program.bindings["e"].is_written()

def test_non_computed_property_is_not_a_reference():
    program = analyze(parse("var a = 1; o.a; o = {a: 2};"))
    assert len(program.bindings["a"].references) == 0

def test_shorthand_property_is_a_reference():
    ast = parse("var a = 1; o = {a};")
    program = analyze(ast)
    assert len(program.bindings["a"].references) == 1
    prop = ast.body[1].expression.right.properties[0]
    assert prop.key is not prop.value

def test_destructuring_declaration():
    program = analyze(parse("var {a, b: c} = o; var [d, ...e] = p;"))
    assert {"a", "c", "d", "e"} <= set(program.bindings)
    assert "b" not in program.bindings

def test_block_function_is_visible_in_its_function():
    program = analyze(parse("function f() { { function g() {} } g(); }"))
    fscope = program.children[0]
    binding = fscope.bindings["g"]
    assert binding.scope.kind == "block"
    assert len(binding.references) == 1
    assert not binding.pinned

def test_block_function_shadowed_by_let_is_not_hoisted():
    program = analyze(parse("function f() { { let g; { function g() {} } } g(); }"))
    assert "g" not in program.children[0].bindings

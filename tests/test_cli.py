import json
from transform import main

SOURCE = 'var _0xab=["foo","bar"]; x(_0xab[0]+_0xab[1]);'

def write_input(tmp_path, text=SOURCE):
    path = tmp_path / "input.js"
    path.write_text(text, encoding="utf-8")
    return path

def test_stdout(tmp_path, capsys):
    path = write_input(tmp_path)
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == 'x("foobar");\n'

def test_output_and_report_files(tmp_path):
    path = write_input(tmp_path)
    out = tmp_path / "out.js"
    report = tmp_path / "report.json"
    assert main([str(path), "-o", str(out), "--report", str(report)]) == 0
    assert out.read_text(encoding="utf-8") == 'x("foobar");\n'
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["strings_decoded"] == 2
    assert data["removed_arrays"] == 1
    assert data["passes_applied"][0] == "stringArray"

def test_passes_option(tmp_path, capsys):
    path = write_input(tmp_path, "x = 1 + 2; debugger;")
    assert main([str(path), "--passes", "constFold", "--no-rename"]) == 0
    assert capsys.readouterr().out == "x = 3;\ndebugger;\n"

def test_missing_input(tmp_path):
    assert main([str(tmp_path / "nope.js")]) == 3

def test_input_too_big(tmp_path):
    path = write_input(tmp_path)
    assert main([str(path), "--max-size", "4"]) == 4

def test_parse_error(tmp_path, capsys):
    path = write_input(tmp_path, "var = ;")
    assert main([str(path)]) == 1
    assert "Parse error" in capsys.readouterr().err

def test_usage_error():
    assert main(["--bogus"]) == 2

def test_verbose_report_on_stderr(tmp_path, capsys):
    path = write_input(tmp_path)
    assert main([str(path), "-v"]) == 0
    assert '"passes_applied"' in capsys.readouterr().err

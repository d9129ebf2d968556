import pytest
from report import TransformationReport, PassOutcome, INITIAL_COUNTERS
from pipeline import PassError

def test_initial_counters():
    report = TransformationReport()
    for k in INITIAL_COUNTERS:
        assert report[k] == 0
    assert report["passes_applied"] == []
    assert "removed_arrays" not in report

def test_absorb_sums_counters():
    report = TransformationReport()
    report.absorb(PassOutcome("stringArray", {"strings_decoded": 2, "removed_arrays": 1}, None))
    report.absorb(PassOutcome("hexBase64", {"strings_decoded": 3}, None))
    assert report["strings_decoded"] == 5
    assert report["removed_arrays"] == 1
    assert report["passes_applied"] == ["stringArray", "hexBase64"]

def test_absorb_error():
    report = TransformationReport()
    report.absorb(PassOutcome("junk", None, PassError("junk", "bad")))
    assert report["notes"] == ["junk-error:bad"]
    assert report["passes_applied"] == []

def test_non_numeric_stats_become_notes():
    report = TransformationReport()
    report.absorb(PassOutcome("junk", {"skipped": ["a"], "empty": []}, None))
    assert report["notes"] == ['junk:skipped=["a"]']

def test_sealed():
    report = TransformationReport()
    report.seal()
    with pytest.raises(RuntimeError):
        report.absorb(PassOutcome("junk", {}, None))

def test_to_dict():
    report = TransformationReport()
    report.note("hello")
    d = report.to_dict()
    assert d["notes"] == ["hello"]
    assert d["passes_applied"] == []
    assert d["strings_decoded"] == 0
    assert report.get("missing", 7) == 7

def test_sealed_fields_are_read_only():
    report = TransformationReport()
    report.absorb(PassOutcome("junk", {"dead_blocks_removed": 1}, None))
    report.seal()
    with pytest.raises(AttributeError):
        report.passes_applied.append("idRename")
    with pytest.raises(AttributeError):
        report.notes.append("late")
    with pytest.raises(TypeError):
        report.counters["dead_blocks_removed"] = 5
    assert report["dead_blocks_removed"] == 1
    assert report.to_dict()["passes_applied"] == ["junk"]

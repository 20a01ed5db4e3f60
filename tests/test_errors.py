from gasmeter.errors import (
    InstrumentError,
    LabelGenerationExhaustedError,
    ResolveError,
    TrailingLabelsError,
    UndefinedLabelError,
)


def test_trailing_labels_message_lists_labels():
    err = TrailingLabelsError(["foo", "bar"])
    assert "foo" in str(err)
    assert "bar" in str(err)
    assert err.labels == ["foo", "bar"]


def test_undefined_label_message():
    err = UndefinedLabelError("missing", 42)
    assert "missing" in str(err)
    assert "42" in str(err)
    assert err.label == "missing"
    assert err.line == 42


def test_resolve_errors_share_base():
    undefined = UndefinedLabelError(".Lmissing", 1)
    assert isinstance(undefined, ResolveError)
    assert undefined.label == ".Lmissing"
    assert undefined.line == 1

    trailing = TrailingLabelsError([".Ldangling"])
    assert isinstance(trailing, ResolveError)
    assert trailing.labels == [".Ldangling"]


def test_errors_compare_by_content():
    assert TrailingLabelsError(["a"]) == TrailingLabelsError(["a"])
    assert UndefinedLabelError("x", 3) == UndefinedLabelError("x", 3)
    assert not (UndefinedLabelError("x", 3) == UndefinedLabelError("x", 4))


def test_label_generation_exhausted():
    err = LabelGenerationExhaustedError(10_000)
    assert isinstance(err, InstrumentError)
    assert err.max_attempts == 10_000
    assert "10000" in str(err)
    assert "exceeded maximum label generation attempts" in str(err)
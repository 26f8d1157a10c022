"""Tests for diagnostic normalization."""

from pathlib import Path

from kaos.normalize import Context, diagnostics

CONTEXT = Context(source_dir=Path("/home/dev/project"), workspace=Path("/tmp/kaos-abc"))


def test_replaces_known_locations() -> None:
    """Workspace and source paths become placeholders."""
    raw = b"/tmp/kaos-abc/kaos000.pyc\n/home/dev/project/kaos-tests/a.py:3: boom\n"

    assert diagnostics(raw, CONTEXT) == (
        "$WORKSPACE/kaos000.pyc\n$DIR/kaos-tests/a.py:3: boom"
    )


def test_prefers_longest_location() -> None:
    """A workspace nested in the source dir is replaced as a whole."""
    context = Context(
        source_dir=Path("/home/dev/project"),
        workspace=Path("/home/dev/project/target/kaos"),
    )

    assert diagnostics("/home/dev/project/target/kaos/x", context) == "$WORKSPACE/x"


def test_strips_trailing_whitespace_and_blank_lines() -> None:
    """Trailing whitespace and blank lines are dropped."""
    assert diagnostics(b"line one   \r\nline two\t\n\n\n", CONTEXT) == (
        "line one\nline two"
    )


def test_replaces_undecodable_bytes() -> None:
    """Invalid UTF-8 does not break normalization."""
    assert diagnostics(b"bad \xff byte", CONTEXT) == "bad � byte"

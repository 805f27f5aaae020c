"""Tests for the marg command line."""

import json
import subprocess
import tempfile
from pathlib import Path

NOTES = """# Book
:PROPERTIES:
:NOTER_DOCUMENT: book.pdf
:END:

## A
:PROPERTIES:
:NOTER_PAGE: 1
:END:

## B
:PROPERTIES:
:NOTER_PAGE: 3
:END:

## C
:PROPERTIES:
:NOTER_PAGE: (3 . 0.5)
:END:
"""


def marg(*args, cwd):
    return subprocess.run(["marg", *args], capture_output=True, text=True, cwd=cwd)


def test_view_json():
    """The notes on page 3 are reported with their locations."""
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "notes.md").write_text(NOTES)

        result = marg("--json", "view", "notes.md", "book.pdf", "--page", "3", cwd=tmpdir)

        assert result.returncode == 0, result.stderr
        data = json.loads(result.stdout)
        assert data["count"] == "2 notes"
        assert [n["title"] for n in data["notes"]] == ["B", "C"]
        assert [n["location"] for n in data["notes"]] == ["3", "(3 . 0.5)"]
        assert len(data["regions"]) == 1
        assert data["prev_regions"] == []


def test_view_creates_document_heading():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = marg("view", "reading.md", "paper.pdf", cwd=tmpdir)

        assert result.returncode == 0, result.stderr
        assert result.stdout.splitlines()[0] == "0 notes"
        text = Path(tmpdir, "reading.md").read_text()
        assert text == "# paper\n:PROPERTIES:\n:NOTER_DOCUMENT: paper.pdf\n:END:\n"


def test_insert_new_note():
    with tempfile.TemporaryDirectory() as tmpdir:
        notes = Path(tmpdir, "notes.md")
        notes.write_text(NOTES)

        result = marg(
            "insert", "notes.md", "book.pdf", "--page", "5",
            "--title", "Thoughts", "--selection", "quoted line",
            cwd=tmpdir,
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "Thoughts"
        assert notes.read_text().endswith(
            ":END:\n\n## Thoughts\n:PROPERTIES:\n:NOTER_PAGE: 5\n:END:\nquoted line\n"
        )


def test_insert_merges_into_existing_note():
    with tempfile.TemporaryDirectory() as tmpdir:
        notes = Path(tmpdir, "notes.md")
        notes.write_text(NOTES)

        result = marg(
            "--json", "insert", "notes.md", "book.pdf", "--page", "3",
            "--title", "B", "--selection", "quote",
            cwd=tmpdir,
        )

        assert result.returncode == 0, result.stderr
        assert json.loads(result.stdout)["title"] == "B"
        assert ":NOTER_PAGE: 3\n:END:\nquote\n\n## C" in notes.read_text()


def test_insert_precise_note():
    with tempfile.TemporaryDirectory() as tmpdir:
        notes = Path(tmpdir, "notes.md")
        notes.write_text(NOTES)

        result = marg(
            "insert", "notes.md", "book.pdf", "--page", "3",
            "--precise", "--click", "0.4,0.2",
            cwd=tmpdir,
        )

        assert result.returncode == 0, result.stderr
        assert ":NOTER_PAGE: (3 0.4 . 0.2)" in notes.read_text()


def test_insert_aborted_without_click():
    with tempfile.TemporaryDirectory() as tmpdir:
        notes = Path(tmpdir, "notes.md")
        notes.write_text(NOTES)

        result = marg("insert", "notes.md", "book.pdf", "--page", "3", "--precise", cwd=tmpdir)

        assert result.returncode == 1
        assert "aborted" in result.stderr
        assert notes.read_text() == NOTES


def test_page_navigation():
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "notes.md").write_text(NOTES)

        result = marg("page", "next", "notes.md", "book.pdf", "--page", "1", cwd=tmpdir)
        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "3"

        result = marg("page", "prev", "notes.md", "book.pdf", "--page", "1", cwd=tmpdir)
        assert result.returncode == 1
        assert "Error: There are no more previous pages" in result.stderr


def test_note_navigation_from_line():
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "notes.md").write_text(NOTES)

        result = marg(
            "note", "next", "notes.md", "book.pdf", "--page", "3", "--line", "1", cwd=tmpdir
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "1\tA"


def test_previous_note_from_line_inside_note():
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "notes.md").write_text(NOTES)

        result = marg(
            "note", "prev", "notes.md", "book.pdf", "--page", "3", "--line", "14", cwd=tmpdir
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "1\tA"


def test_set_start_location():
    with tempfile.TemporaryDirectory() as tmpdir:
        notes = Path(tmpdir, "notes.md")
        notes.write_text(NOTES)

        result = marg("set-start", "notes.md", "book.pdf", "--page", "4", cwd=tmpdir)

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "4"
        assert notes.read_text().startswith(
            "# Book\n:PROPERTIES:\n:NOTER_DOCUMENT: book.pdf\n:NOTER_PAGE: 4\n:END:\n"
        )


def test_unsupported_document():
    with tempfile.TemporaryDirectory() as tmpdir:
        Path(tmpdir, "notes.md").write_text(NOTES)

        result = marg("view", "notes.md", "notes.txt", cwd=tmpdir)

        assert result.returncode == 1
        assert "Error: Document handler not supported" in result.stderr

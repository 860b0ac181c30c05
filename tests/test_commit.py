"""Tests for the commit model."""

from datetime import datetime, timezone

import pytest

from patch_sync.commit import (
    Commit,
    CommitHeader,
    FileDiff,
    format_path,
    needs_quoting,
    parse_header,
    quote_path,
    split_diff,
    unquote_path,
)

TWO_FILE_DIFF = """\
diff --git a/lib/a.txt b/lib/a.txt
new file mode 100644
index 0000000..ce01362
--- /dev/null
+++ b/lib/a.txt
@@ -0,0 +1 @@
+hello
diff --git a/docs/my notes.md b/docs/my notes.md
index 3b18e51..a042389 100644
--- a/docs/my notes.md
+++ b/docs/my notes.md
@@ -1 +1 @@
-hello world
+hello there
"""


def make_header(commit_id: str = "a" * 40, parents: tuple[str, ...] = ("b" * 40,)) -> CommitHeader:
    return CommitHeader(
        id=commit_id,
        parents=parents,
        author_name="Jane Contributor",
        author_email="jane@example.com",
        timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        message="Add a",
    )


class TestSplitDiff:
    """Tests for splitting a diff into per-file bodies."""

    def test_split_two_files(self):
        diffs = split_diff(TWO_FILE_DIFF)

        assert [d.path for d in diffs] == ["lib/a.txt", "docs/my notes.md"]
        assert diffs[0].body.startswith("diff --git a/lib/a.txt")
        assert diffs[1].body.endswith("+hello there\n")
        assert "".join(d.body for d in diffs) == TWO_FILE_DIFF

    def test_split_ignores_leading_text(self):
        diffs = split_diff("\n" + TWO_FILE_DIFF)
        assert len(diffs) == 2

    def test_split_empty(self):
        assert split_diff("") == ()

    def test_split_quoted_path(self):
        text = 'diff --git "a/odd\\"name.txt" "b/odd\\"name.txt"\n'
        (diff,) = split_diff(text)
        assert diff.path == 'odd"name.txt'

    def test_split_quoted_path_with_escapes(self):
        """Test tab, backslash and octal escaped UTF-8 bytes are decoded."""
        text = 'diff --git "a/dir/caf\\303\\251\\tx\\\\y.txt" "b/dir/caf\\303\\251\\tx\\\\y.txt"\n'
        (diff,) = split_diff(text)
        assert diff.path == "dir/café\tx\\y.txt"


class TestPathQuoting:
    """Tests for git's C-style path quoting."""

    def test_plain_names_are_not_quoted(self):
        assert needs_quoting("docs/my notes.md") is False
        assert format_path("a/", "docs/café.md") == "a/docs/café.md"

    def test_format_quoted_name(self):
        assert format_path("b/", 'core/q"uote.txt') == '"b/core/q\\"uote.txt"'
        assert format_path("a/", "tab\there") == '"a/tab\\there"'
        assert format_path("a/", "bell\x01") == '"a/bell\\001"'

    def test_unquote_reverses_quote(self):
        name = 'dir/weïrd\t"name"\\\x7f.txt'
        assert unquote_path(quote_path(name)) == name


class TestParseHeader:
    """Tests for parsing the NUL separated header format."""

    def test_parse_header(self):
        raw = "\x00".join([
            "a" * 40,
            f"{'b' * 40} {'c' * 40}",
            "Jane Contributor",
            "jane@example.com",
            "2024-05-01T14:00:00+02:00",
            "Merge branch\n\nDetails\n",
        ])
        header = parse_header(raw)

        assert header.id == "a" * 40
        assert header.parents == ("b" * 40, "c" * 40)
        assert header.is_merge is True
        assert header.message == "Merge branch\n\nDetails"
        assert header.timestamp == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        assert header.author == "Jane Contributor <jane@example.com>"

    def test_parse_root_header(self):
        raw = "\x00".join(["a" * 40, "", "Jane", "jane@example.com", "2024-05-01T12:00:00+00:00", "Root\n"])
        header = parse_header(raw)
        assert header.parents == ()
        assert header.is_merge is False


class TestCommit:
    """Tests for Commit value semantics."""

    def test_is_valid(self):
        commit = Commit(make_header(), split_diff(TWO_FILE_DIFF))
        assert commit.is_valid() is True

    def test_empty_commit_is_invalid(self):
        assert Commit(make_header()).is_valid() is False
        assert Commit(make_header(), (FileDiff("a.txt", "  \n"),)).is_valid() is False

    def test_equality_by_identity(self):
        first = Commit(make_header(), split_diff(TWO_FILE_DIFF))
        second = Commit(make_header(), ())
        other = Commit(make_header(commit_id="d" * 40), ())

        assert first == second
        assert first != other
        assert len({first, second, other}) == 2

    def test_with_message_returns_new_commit(self):
        commit = Commit(make_header())
        renamed = commit.with_message("Changed")

        assert renamed.header.message == "Changed"
        assert commit.header.message == "Add a"
        assert renamed.id == commit.id

    def test_commit_is_frozen(self):
        commit = Commit(make_header())
        with pytest.raises(AttributeError):
            commit.diffs = ()

"""Tests for git log parsing."""

from datetime import datetime, timedelta, timezone

import pytest
from conftest import BOB, CAROL, change, make_commit, render_log, render_log_entry

from churnscope.exceptions import NoCommitsError
from churnscope.temporal.log_parser import (
    FIELD_SEPARATOR,
    HEADER_COLUMNS,
    LOG_FORMAT,
    RECORD_SEPARATOR,
    decode_quoted_path,
    decode_rename_path,
    parse_commit,
    parse_log,
    parse_numstat_line,
    unquote_c_path,
)
from churnscope.temporal.models import FileChange, FileStatus


def header(*fields: str) -> str:
    return FIELD_SEPARATOR.join(fields)


VALID_HEADER = header(
    "a" * 40,
    "aaaaaaa",
    "Alice",
    "alice@example.com",
    "2024-03-01T10:00:00+02:00",
    "Alice",
    "alice@example.com",
    "Add feature",
    "",
    "",
)


class TestLogFormat:
    def test_ten_columns_behind_record_separator(self):
        assert LOG_FORMAT.startswith(RECORD_SEPARATOR)
        assert LOG_FORMAT[1:].split(FIELD_SEPARATOR) == [
            "%H", "%h", "%an", "%ae", "%aI", "%cn", "%ce", "%s", "%b", "%P",
        ]
        assert HEADER_COLUMNS == 10


class TestParseNumstatLine:
    def test_plain_line(self):
        fc = parse_numstat_line("12\t3\tsrc/app.ts")
        assert fc == FileChange(path="src/app.ts", additions=12, deletions=3)
        assert fc.status is FileStatus.MODIFIED
        assert not fc.binary

    def test_binary_line(self):
        fc = parse_numstat_line("-\t-\tassets/logo.png")
        assert fc.binary
        assert fc.additions == 0
        assert fc.deletions == 0
        assert fc.path == "assets/logo.png"

    def test_single_dash_is_binary(self):
        fc = parse_numstat_line("5\t-\tdata.bin")
        assert fc.binary
        assert fc.lines_changed == 0

    def test_full_rename(self):
        fc = parse_numstat_line("3\t0\told/name.ts => new/name.ts")
        assert fc.path == "new/name.ts"
        assert fc.old_path == "old/name.ts"
        assert fc.additions == 3
        assert fc.deletions == 0
        assert fc.status is FileStatus.RENAMED

    def test_brace_rename(self):
        fc = parse_numstat_line("1\t1\tsrc/{old => new}/util.ts")
        assert fc.path == "src/new/util.ts"
        assert fc.old_path == "src/old/util.ts"
        assert fc.status is FileStatus.RENAMED

    def test_path_with_spaces(self):
        fc = parse_numstat_line("2\t0\tdocs/my notes.md")
        assert fc.path == "docs/my notes.md"

    def test_trailing_carriage_return(self):
        fc = parse_numstat_line("2\t1\tsrc/a.ts\r")
        assert fc.path == "src/a.ts"

    @pytest.mark.parametrize(
        "line",
        ["", "not a numstat line", "1\tsrc/a.ts", "x\t1\tsrc/a.ts", "1 2 src/a.ts"],
    )
    def test_non_numstat_lines(self, line):
        assert parse_numstat_line(line) is None


class TestDecodeRenamePath:
    def test_no_rename(self):
        assert decode_rename_path("src/a.ts") == ("src/a.ts", None)

    def test_arrow_rename(self):
        assert decode_rename_path("a.ts => b.ts") == ("b.ts", "a.ts")

    def test_brace_rename_at_start(self):
        assert decode_rename_path("{lib => src}/a.ts") == ("src/a.ts", "lib/a.ts")

    def test_brace_rename_of_file_name(self):
        assert decode_rename_path("src/{a.ts => b.ts}") == ("src/b.ts", "src/a.ts")

    def test_empty_old_side_collapses_slashes(self):
        assert decode_rename_path("src/{ => lib}/a.ts") == ("src/lib/a.ts", "src/a.ts")

    def test_empty_new_side_collapses_slashes(self):
        assert decode_rename_path("src/{lib => }/a.ts") == ("src/a.ts", "src/lib/a.ts")

    def test_multiple_brace_groups_kept_verbatim(self):
        raw = "{a => b}/x/{c => d}.ts"
        assert decode_rename_path(raw) == (raw, None)

    def test_multiple_arrows_kept_verbatim(self):
        raw = "a => b => c"
        assert decode_rename_path(raw) == (raw, None)


class TestQuotedPaths:
    def test_octal_escapes_decode_as_utf8(self):
        fc = parse_numstat_line('1\t0\t"src/caf\\303\\251.ts"')
        assert fc.path == "src/café.ts"
        assert fc.old_path is None

    def test_quote_and_tab_escapes(self):
        fc = parse_numstat_line('2\t1\t"docs/say \\"hi\\"\\tnow.md"')
        assert fc.path == 'docs/say "hi"\tnow.md'

    def test_backslash_escape(self):
        assert unquote_c_path('"a\\\\b.ts"') == ("a\\b.ts", "")

    def test_unterminated_quote(self):
        assert unquote_c_path('"never closed') is None
        assert decode_quoted_path('"never closed') == ('"never closed', None)

    def test_quoted_rename(self):
        fc = parse_numstat_line('0\t0\t"old/caf\\303\\251.ts" => "new/caf\\303\\251.ts"')
        assert fc.path == "new/café.ts"
        assert fc.old_path == "old/café.ts"
        assert fc.status is FileStatus.RENAMED

    def test_mixed_quoting_in_rename(self):
        assert decode_quoted_path('plain.ts => "tab\\there.ts"') == ("tab\there.ts", "plain.ts")
        assert decode_quoted_path('"tab\\there.ts" => plain.ts') == ("plain.ts", "tab\there.ts")

    def test_garbage_after_quoted_path_kept_verbatim(self):
        raw = '"a.ts" and more'
        assert decode_quoted_path(raw) == (raw, None)


class TestParseCommit:
    def test_header_and_files(self):
        fragment = VALID_HEADER + "\n\n3\t1\tsrc/app.ts\n-\t-\tlogo.png\n"
        commit = parse_commit(fragment)

        assert commit is not None
        assert commit.hash == "a" * 40
        assert commit.short_hash == "aaaaaaa"
        assert commit.author.name == "Alice"
        assert commit.author.email == "alice@example.com"
        assert commit.timestamp == datetime(
            2024, 3, 1, 10, 0, tzinfo=timezone(timedelta(hours=2))
        )
        assert commit.subject == "Add feature"
        assert commit.parents == ()
        assert [f.path for f in commit.files] == ["src/app.ts", "logo.png"]

    def test_multiline_body(self):
        fragment = (
            header(
                "b" * 40, "bbbbbbb", "Bob", "bob@example.com", "2024-03-01T10:00:00Z",
                "Bob", "bob@example.com", "Fix bug", "Line one\nLine two\n", "p1 p2",
            )
            + "\n\n1\t1\tsrc/a.ts\n"
        )
        commit = parse_commit(fragment)

        assert commit.body == "Line one\nLine two"
        assert commit.message == "Fix bug\n\nLine one\nLine two"
        assert commit.parents == ("p1", "p2")
        assert commit.is_merge
        assert commit.timestamp.tzinfo is not None

    def test_numstat_shaped_body_line_stays_in_body(self):
        fragment = (
            header(
                "c" * 40, "ccccccc", "Carol", "carol@example.com", "2024-03-01T10:00:00Z",
                "Carol", "carol@example.com", "Tune limits", "Table:\n3\t4\tnot numstat\n", "",
            )
            + "\n\n5\t2\tsrc/limits.ts\n"
        )
        commit = parse_commit(fragment)

        assert commit is not None
        assert commit.body == "Table:\n3\t4\tnot numstat"
        assert [f.path for f in commit.files] == ["src/limits.ts"]

    def test_commit_without_files(self):
        commit = parse_commit(VALID_HEADER + "\n")
        assert commit is not None
        assert commit.files == ()

    def test_too_few_columns(self):
        fragment = header("a" * 40, "aaaaaaa", "Alice") + "\n\n1\t1\ta.ts\n"
        assert parse_commit(fragment) is None

    def test_missing_hash(self):
        fragment = VALID_HEADER.replace("a" * 40, "", 1)
        assert parse_commit(fragment) is None

    def test_unparsable_date(self):
        fragment = VALID_HEADER.replace("2024-03-01T10:00:00+02:00", "yesterday")
        assert parse_commit(fragment) is None


class TestParseLog:
    def test_empty_log_is_fatal(self):
        with pytest.raises(NoCommitsError):
            parse_log("")

    def test_only_malformed_fragments_is_fatal(self):
        with pytest.raises(NoCommitsError):
            parse_log(RECORD_SEPARATOR + "garbage\n" + RECORD_SEPARATOR + "more garbage")

    def test_malformed_fragment_is_dropped(self):
        good = make_commit(1, ["src/a.ts"])
        raw = RECORD_SEPARATOR + "broken\x1fheader\n" + render_log_entry(good)
        commits = parse_log(raw)
        assert [c.hash for c in commits] == [good.hash]

    def test_preserves_input_order(self):
        commits = [make_commit(i, [f"f{i}.ts"]) for i in (3, 1, 2)]
        parsed = parse_log(render_log(commits))
        assert [c.hash for c in parsed] == [c.hash for c in commits]

    def test_round_trip(self):
        original = [
            make_commit(
                1,
                [
                    change("src/app.ts", 10, 2),
                    FileChange(path="img/logo.png", binary=True),
                    FileChange(
                        path="new/name.ts",
                        additions=3,
                        status=FileStatus.RENAMED,
                        old_path="old/name.ts",
                    ),
                ],
                author=BOB,
                body="Longer explanation\nover two lines",
            ),
            make_commit(2, ["README.md"], author=CAROL, parents=("abc", "def")),
        ]

        parsed = parse_log(render_log(original))

        assert len(parsed) == len(original)
        assert len({c.short_hash for c in parsed}) == len(parsed)
        for got, want in zip(parsed, original):
            assert got.hash == want.hash
            assert got.short_hash == want.short_hash
            assert got.author == want.author
            assert got.timestamp == want.timestamp
            assert got.message == want.message
            assert got.parents == want.parents
            assert got.files == want.files

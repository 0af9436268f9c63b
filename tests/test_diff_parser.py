"""Tests for the unified diff parser and diff → content unit conversion."""

from leakscan.git.diff_parser import DiffParser, iter_file_units, split_patch
from leakscan.git.models import DiffFile, DiffLine, FileSkipped, FileStatus, LineType


class TestBasicParsing:
    def test_added_lines(self, sample_diff_clean):
        items = list(DiffParser(sample_diff_clean).parse())
        diff_files = [i for i in items if isinstance(i, DiffFile)]
        diff_lines = [i for i in items if isinstance(i, DiffLine)]

        assert len(diff_files) == 1
        assert diff_files[0].path == "hello.py"
        assert len(diff_lines) == 3
        assert all(dl.line_type == LineType.ADDED for dl in diff_lines)
        assert diff_lines[0].content == 'def greet(name):'
        assert diff_lines[0].line_no == 1

    def test_removed_lines_not_yielded(self, sample_diff_with_mailgun):
        lines = [i for i in DiffParser(sample_diff_with_mailgun).parse() if isinstance(i, DiffLine)]
        assert [dl.content for dl in lines][0] == "DEBUG = False"
        assert [dl.line_no for dl in lines] == [10, 11]


class TestEdgeCases:
    def test_binary_file_skipped(self, sample_diff_binary):
        items = list(DiffParser(sample_diff_binary).parse())
        skipped = [i for i in items if isinstance(i, FileSkipped)]
        assert len(skipped) == 1
        assert skipped[0].reason == "binary"
        assert skipped[0].path == "cert.p12"

    def test_rename_tracked(self, sample_diff_rename):
        items = list(DiffParser(sample_diff_rename).parse())
        files = [i for i in items if isinstance(i, DiffFile)]
        assert len(files) == 1
        assert files[0].path == "new_name.py"
        assert files[0].old_path == "old_name.py"
        assert files[0].status == FileStatus.RENAMED

    def test_mode_only_skipped(self, sample_diff_mode_only):
        items = list(DiffParser(sample_diff_mode_only).parse())
        skipped = [i for i in items if isinstance(i, FileSkipped)]
        assert len(skipped) == 1
        assert skipped[0].reason == "mode_only"

    def test_deleted_file_skipped(self, sample_diff_deleted):
        items = list(DiffParser(sample_diff_deleted).parse())
        assert [i.reason for i in items if isinstance(i, FileSkipped)] == ["deleted"]
        assert not [i for i in items if isinstance(i, DiffLine)]

    def test_no_newline_marker_ignored(self, sample_diff_no_newline):
        items = list(DiffParser(sample_diff_no_newline).parse())
        lines = [i for i in items if isinstance(i, DiffLine)]
        assert len(lines) == 1
        assert lines[0].content == "final line without newline"

    def test_consecutive_hunks(self):
        """Two hunks in the same file — line counter resets."""
        diff = (
            "diff --git a/f.py b/f.py\n"
            "index abc..def 100644\n"
            "--- a/f.py\n"
            "+++ b/f.py\n"
            "@@ -5,0 +5,1 @@\n"
            "+line at 5\n"
            "@@ -20,0 +21,1 @@\n"
            "+line at 21\n"
        )
        items = list(DiffParser(diff).parse())
        lines = [i for i in items if isinstance(i, DiffLine)]
        assert len(lines) == 2
        assert lines[0].line_no == 5
        assert lines[1].line_no == 21

    def test_bom_stripped(self):
        """UTF-8 BOM at start of content is removed."""
        diff = (
            "diff --git a/bom.txt b/bom.txt\n"
            "new file mode 100644\n"
            "index 0000000..abc1234\n"
            "--- /dev/null\n"
            "+++ b/bom.txt\n"
            "@@ -0,0 +1,1 @@\n"
            "+\ufeffhello world\n"
        )
        items = list(DiffParser(diff).parse())
        lines = [i for i in items if isinstance(i, DiffLine)]
        assert len(lines) == 1
        assert lines[0].content == "hello world"

    def test_file_headers_not_content(self):
        """--- a/file and +++ b/file should not appear as added lines."""
        diff = (
            "diff --git a/config.py b/config.py\n"
            "index abc..def 100644\n"
            "--- a/config.py\n"
            "+++ b/config.py\n"
            "@@ -1,0 +2,1 @@\n"
            "+new line\n"
        )
        items = list(DiffParser(diff).parse())
        lines = [i for i in items if isinstance(i, DiffLine)]
        assert len(lines) == 1
        assert "---" not in lines[0].content
        assert "+++" not in lines[0].content

    def test_header_like_lines_inside_hunk_are_content(self):
        """An added '++ b/x' or removed '-- a/x' line stays in the current file."""
        diff = (
            "diff --git a/notes.md b/notes.md\n"
            "--- a/notes.md\n"
            "+++ b/notes.md\n"
            "@@ -1,2 +1,3 @@\n"
            "--- a/old.txt\n"
            " context\n"
            "+++ b/other.txt\n"
            "+token=abc\n"
            "diff --git a/next.py b/next.py\n"
            "--- a/next.py\n"
            "+++ b/next.py\n"
            "@@ -0,0 +1 @@\n"
            "+x = 1\n"
        )
        lines = [i for i in DiffParser(diff).parse() if isinstance(i, DiffLine)]
        assert [(dl.file, dl.line_no, dl.content) for dl in lines] == [
            ("notes.md", 2, "++ b/other.txt"),
            ("notes.md", 3, "token=abc"),
            ("next.py", 1, "x = 1"),
        ]

    def test_headerless_patch_uses_default_file(self):
        patch = "@@ -0,0 +1,2 @@\n+first\n+second\n"
        lines = [
            i for i in DiffParser(patch, default_file="src/app.py").parse()
            if isinstance(i, DiffLine)
        ]
        assert [dl.file for dl in lines] == ["src/app.py", "src/app.py"]
        assert [dl.line_no for dl in lines] == [1, 2]


class TestSplitPatch:
    def test_splits_per_file(self, sample_diff_clean, sample_diff_with_aws_key):
        pairs = split_patch(sample_diff_clean + sample_diff_with_aws_key)
        assert [path for _, path in pairs] == ["hello.py", "config.py"]
        assert pairs[1][0].startswith("diff --git a/config.py b/config.py")

    def test_empty_patch(self):
        assert split_patch("") == []


class TestFileUnits:
    def test_one_unit_per_file(self, sample_diff_clean, sample_diff_with_aws_key, commit_info):
        units = list(
            iter_file_units(sample_diff_clean + sample_diff_with_aws_key, commit=commit_info, repo="r")
        )
        assert [u.path for u in units] == ["hello.py", "config.py"]
        assert all(u.commit == commit_info and u.repo == "r" for u in units)

    def test_line_numbers_follow_new_side(self, sample_diff_with_mailgun):
        (unit,) = iter_file_units(sample_diff_with_mailgun)
        assert list(unit.lines())[1][0] == 11

    def test_binary_file_gives_empty_unit(self, sample_diff_binary):
        (unit,) = iter_file_units(sample_diff_binary)
        assert unit.path == "cert.p12"
        assert unit.text == ""
        assert list(unit.lines()) == []

    def test_deleted_and_mode_only_give_nothing(self, sample_diff_deleted, sample_diff_mode_only):
        assert list(iter_file_units(sample_diff_deleted + sample_diff_mode_only)) == []

    def test_deleted_file_with_default_file(self, sample_diff_deleted):
        assert list(iter_file_units(sample_diff_deleted, default_file="old.env")) == []

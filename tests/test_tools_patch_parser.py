import pytest

from gambit.tools.patch_parser import (
    HunkHeaderError,
    iter_hunks,
    normalize_patch_path,
    split_unified_diff_by_file,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("a/src/app.py", "src/app.py"),
        ("b/src/app.py", "src/app.py"),
        ("./notes.txt", "notes.txt"),
        ("dir\\sub\\file.txt", "dir/sub/file.txt"),
        ("  spaced.txt  ", "spaced.txt"),
        ("plain.txt", "plain.txt"),
        ("/dev/null", None),
        ("", None),
        (None, None),
        ("   ", None),
    ],
)
def test_normalize_patch_path(raw, expected) -> None:
    assert normalize_patch_path(raw) == expected


def test_normalize_strips_only_one_prefix() -> None:
    assert normalize_patch_path("a/b/file.txt") == "b/file.txt"
    assert normalize_patch_path("././file.txt") == "./file.txt"


def test_split_two_files_in_order_with_rename() -> None:
    diff = """diff --git a/a.txt b/a.txt
--- a/a.txt
+++ b/a.txt
@@ -1 +1 @@
-one
+two
diff --git a/old b/new
--- a/old
+++ b/new
@@ -1 +1 @@
-x
+y
"""
    patches = split_unified_diff_by_file(diff)

    assert len(patches) == 2
    first, second = patches
    assert first.old_path == first.new_path == "a.txt"
    assert first.patch_text.startswith("diff --git a/a.txt b/a.txt")
    assert "+two" in first.patch_text
    assert "+y" not in first.patch_text
    assert second.old_path == "old"
    assert second.new_path == "new"
    assert second.raw_old_path == "a/old"
    assert second.raw_new_path == "b/new"


def test_split_deletion_to_dev_null() -> None:
    diff = "--- a/x.txt\n+++ /dev/null\n@@ -1 +0,0 @@\n-bye\n"

    patches = split_unified_diff_by_file(diff)

    assert len(patches) == 1
    assert patches[0].old_path == "x.txt"
    assert patches[0].new_path is None
    assert patches[0].raw_new_path == "/dev/null"


def test_split_creation_from_dev_null() -> None:
    diff = "diff --git a/new.txt b/new.txt\nnew file mode 100644\n--- /dev/null\n+++ b/new.txt\n@@ -0,0 +1 @@\n+hi\n"

    (patch,) = split_unified_diff_by_file(diff)

    assert patch.old_path is None
    assert patch.new_path == "new.txt"
    assert "new file mode 100644" in patch.patch_text


def test_split_discards_preamble_without_git_header() -> None:
    diff = "Here is the fix:\n\n--- a/f.txt\n+++ b/f.txt\n@@ -1 +1 @@\n-a\n+b\n"

    (patch,) = split_unified_diff_by_file(diff)

    assert patch.patch_text.startswith("--- a/f.txt")
    assert "Here is the fix" not in patch.patch_text


def test_split_without_diff_git_keeps_one_segment_with_last_headers() -> None:
    diff = (
        "--- a/first.txt\n+++ b/first.txt\n@@ -1 +1 @@\n-one\n+uno\n"
        "--- a/second.txt\n+++ b/second.txt\n@@ -1 +1 @@\n-two\n+dos\n"
    )

    (patch,) = split_unified_diff_by_file(diff)

    assert (patch.old_path, patch.new_path) == ("second.txt", "second.txt")
    assert patch.patch_text.count("@@ ") == 2


def test_split_ignores_tab_metadata_in_headers() -> None:
    diff = "--- a/f.txt\t2024-01-01 10:00:00\n+++ b/f.txt\t2024-01-02 10:00:00\n@@ -1 +1 @@\n-a\n+b\n"

    (patch,) = split_unified_diff_by_file(diff)

    assert patch.raw_old_path == "a/f.txt"
    assert patch.new_path == "f.txt"


def test_split_normalizes_crlf() -> None:
    diff = "--- a/f.txt\r\n+++ b/f.txt\r\n@@ -1 +1 @@\r\n-a\r\n+b\r\n"

    (patch,) = split_unified_diff_by_file(diff)

    assert "\r" not in patch.patch_text
    assert patch.new_path == "f.txt"


def test_split_drops_segments_without_file_headers() -> None:
    assert split_unified_diff_by_file("just some prose\nno diff here\n") == []
    assert split_unified_diff_by_file("@@ -1 +1 @@\n-a\n+b\n") == []
    assert split_unified_diff_by_file("diff --git a/x b/x\nBinary files a/x and b/x differ\n") == []


def test_split_keeps_rename_metadata_as_passthrough() -> None:
    diff = (
        "diff --git a/old-name.txt b/renamed/name.txt\n"
        "similarity index 100%\n"
        "rename from old-name.txt\n"
        "rename to renamed/name.txt\n"
        "--- a/old-name.txt\n"
        "+++ b/renamed/name.txt\n"
        "@@ -1,2 +1,2 @@\n"
        "-alpha\n"
        "+alpha-renamed\n"
        " beta\n"
    )

    (patch,) = split_unified_diff_by_file(diff)

    assert patch.old_path == "old-name.txt"
    assert patch.new_path == "renamed/name.txt"
    assert "rename from old-name.txt" in patch.patch_text


def test_iter_hunks_reads_headers_and_bodies() -> None:
    lines = "--- a/f\n+++ b/f\n@@ -1,2 +1,3 @@\n a\n+b\n@@ -9 +10 @@\n-z\n".split("\n")

    hunks = list(iter_hunks(lines))

    assert [(h.old_start, h.old_count, h.new_start, h.new_count) for h in hunks] == [(1, 2, 1, 3), (9, None, 10, None)]
    assert hunks[0].lines == [" a", "+b"]
    assert hunks[1].lines == ["-z", ""]
    assert hunks[1].start_index == 8


def test_iter_hunks_floors_start_index_at_zero() -> None:
    (hunk,) = iter_hunks(["@@ -0,0 +1 @@", "+hi"])
    assert hunk.start_index == 0


def test_iter_hunks_rejects_malformed_header() -> None:
    with pytest.raises(HunkHeaderError) as excinfo:
        list(iter_hunks(["@@ invalid"]))
    assert excinfo.value.header == "@@ invalid"
    assert "Invalid hunk header" in str(excinfo.value)

"""Tests for listing line encoding/decoding.

Covers the fixed column layout, absent owner/group placeholders, filename
column recovery for awkward names, and the never-raising fallback decoder.
"""

from __future__ import annotations

import os
import stat
import tempfile
import unittest
from pathlib import Path

from lazydired.listing_model import (
    DecodeStrategy,
    FileRow,
    StaticIdentityResolver,
    decode_line,
    decode_row,
    encode_row,
    fallback_decode,
    filename_range,
    row_from_stat,
    try_strict_decode,
)
from lazydired.listing_model.codec import normalize_mode_token

DIRECTORY = "/tmp/listing"


def make_row(name: str, **overrides) -> FileRow:
    fields = dict(
        directory=DIRECTORY,
        name=name,
        owner="me",
        group="staff",
        size_bytes=5500,
        month="Dec",
        day=6,
        hour=5,
        minute=9,
        mode_token="-rw-r--r--",
    )
    fields.update(overrides)
    return FileRow(**fields)


class EncodeRowTests(unittest.TestCase):
    def test_encode_row_uses_fixed_column_layout(self) -> None:
        encoded = encode_row(make_row("myfile.txt"))

        self.assertEqual(encoded.line, "  -rw-r--r-- me staff     5.5K Dec 06 05:09 myfile.txt")
        self.assertEqual(encoded.filename_column, len("  -rw-r--r-- me staff     5.5K Dec 06 05:09 "))
        self.assertEqual(encoded.line[encoded.filename_column :], "myfile.txt")

    def test_encode_row_is_idempotent_and_does_not_mutate_row(self) -> None:
        row = make_row("a.txt")
        first = encode_row(row)
        second = encode_row(row)

        self.assertEqual(first, second)
        self.assertIsNone(row.filename_column)

    def test_encode_row_renders_marker_and_numeric_month(self) -> None:
        line = encode_row(make_row("a.txt", marked=True, month=3)).line

        self.assertTrue(line.startswith("* -rw-r--r--"))
        self.assertIn(" 03 06 05:09 a.txt", line)

    def test_encode_row_never_prints_absent_identity_words(self) -> None:
        for owner, group in ((None, None), ("undefined", "null"), ("", "  ")):
            with self.subTest(owner=owner, group=group):
                line = encode_row(make_row("a.txt", owner=owner, group=group)).line
                self.assertNotIn("undefined", line)
                self.assertNotIn("null", line)
                self.assertIn(" -rw-r--r-- - - ", line)

    def test_encode_row_keeps_owner_with_spaces_as_single_token(self) -> None:
        line = encode_row(make_row("a.txt", group="Domain Users")).line
        row = decode_row(DIRECTORY, line)

        self.assertEqual(row.group, "Domain_Users")
        self.assertEqual(row.name, "a.txt")


class DecodeRowTests(unittest.TestCase):
    def test_round_trip_recovers_name_and_column(self) -> None:
        names = [
            "a.txt",
            "file with spaces.txt",
            "12:34 meeting notes",
            "weird:name",
            " leading space",
            "trailing space ",
            "Dec 06 05:09 copy",
            "me staff 5.5K",
        ]
        for name in names:
            with self.subTest(name=name):
                encoded = encode_row(make_row(name))
                result = decode_line(DIRECTORY, encoded.line)

                self.assertEqual(result.strategy, DecodeStrategy.STRICT)
                self.assertEqual(result.row.name, name)
                self.assertEqual(result.row.filename_column, encoded.filename_column)

    def test_decode_recovers_metadata_fields(self) -> None:
        line = encode_row(make_row("dir", mode_token="drwxr-xr-x", marked=True, size_bytes=1234567)).line
        row = try_strict_decode(DIRECTORY, line)

        assert row is not None
        self.assertTrue(row.is_directory)
        self.assertFalse(row.is_regular_file)
        self.assertTrue(row.marked)
        self.assertEqual(row.owner, "me")
        self.assertEqual(row.group, "staff")
        self.assertEqual(row.size_bytes, 1_200_000)
        self.assertEqual((row.month, row.day, row.hour, row.minute), ("Dec", 6, 5, 9))
        self.assertEqual(row.path, os.path.join(DIRECTORY, "dir"))

    def test_decode_treats_placeholder_words_as_absent(self) -> None:
        row = decode_row(DIRECTORY, "  -rw-r--r-- undefined NULL       10 Jan 01 00:00 x")

        self.assertIsNone(row.owner)
        self.assertIsNone(row.group)
        self.assertEqual(row.name, "x")

    def test_decode_absent_identity_round_trip(self) -> None:
        line = encode_row(make_row("myfile2.txt", owner=None, group=None, size_bytes=123)).line
        row = decode_row(DIRECTORY, line)

        self.assertIsNone(row.owner)
        self.assertIsNone(row.group)
        self.assertEqual(row.size_bytes, 123)
        self.assertEqual(row.name, "myfile2.txt")

    def test_decode_numeric_month_round_trips(self) -> None:
        line = encode_row(make_row("a.txt", month=11)).line
        row = decode_row(DIRECTORY, line)

        self.assertEqual(row.month, 11)
        self.assertEqual(encode_row(row).line, line)

    def test_decode_accepts_setuid_and_sticky_mode_tokens(self) -> None:
        line = encode_row(make_row("tmp", mode_token="drwxrwxrwt")).line
        result = decode_line(DIRECTORY, line)

        self.assertTrue(result.is_strict)
        self.assertTrue(result.row.is_directory)


class FallbackDecodeTests(unittest.TestCase):
    def test_fallback_uses_text_after_last_time_token(self) -> None:
        line = "edited 10:30 then 11:45   renamed.txt  "
        result = decode_line(DIRECTORY, line)

        self.assertEqual(result.strategy, DecodeStrategy.FALLBACK)
        self.assertEqual(result.row.name, "renamed.txt")
        self.assertEqual(result.row.filename_column, line.index("renamed.txt"))
        self.assertEqual(result.row.size_bytes, 0)
        self.assertIsNone(result.row.owner)

    def test_fallback_uses_last_token_without_time_token(self) -> None:
        row = fallback_decode(DIRECTORY, "free text notes.md")

        self.assertEqual(row.name, "notes.md")
        self.assertEqual(row.filename_column, len("free text "))

    def test_fallback_prefers_last_occurrence_of_name(self) -> None:
        row = fallback_decode(DIRECTORY, "x y x")

        self.assertEqual(row.name, "x")
        self.assertEqual(row.filename_column, 4)

    def test_fallback_uses_whole_line_without_delimiter(self) -> None:
        row = fallback_decode(DIRECTORY, "  nospace  ")

        self.assertEqual(row.name, "nospace")
        self.assertEqual(row.filename_column, 2)

    def test_decode_never_raises_for_arbitrary_text(self) -> None:
        samples = ["", " ", "\t\t", "*", "::::", "99:99", "12:34", "* -rw", "\x00\x01", "ünïcødé 😀", "a" * 500]
        for sample in samples:
            with self.subTest(sample=sample):
                row = decode_row(DIRECTORY, sample)
                self.assertIsInstance(row, FileRow)
                self.assertEqual(row.directory, DIRECTORY)

    def test_empty_line_decodes_to_empty_name(self) -> None:
        row = decode_row(DIRECTORY, "")

        self.assertEqual(row.name, "")
        self.assertIsNone(row.filename_column)


class FilenameRangeTests(unittest.TestCase):
    def test_filename_range_follows_column_not_fixed_offset(self) -> None:
        with_identity = encode_row(make_row("a.txt", owner="someone-long", group="wheel")).line
        without_identity = encode_row(make_row("a.txt", owner=None, group=None)).line

        start_a, end_a = filename_range(DIRECTORY, with_identity)
        start_b, end_b = filename_range(DIRECTORY, without_identity)

        self.assertNotEqual(start_a, start_b)
        self.assertEqual(with_identity[start_a:end_a], "a.txt")
        self.assertEqual(without_identity[start_b:end_b], "a.txt")

    def test_filename_range_is_none_for_blank_lines(self) -> None:
        self.assertIsNone(filename_range(DIRECTORY, "   "))


class RowFromStatTests(unittest.TestCase):
    def test_row_from_stat_resolves_identity_and_column(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            target = root / "data.bin"
            target.write_bytes(b"x" * 2048)
            st = os.stat(target)

            resolver = StaticIdentityResolver(users={st.st_uid: "alice"})
            row = row_from_stat(str(root), "data.bin", st, resolver)
            encoded = encode_row(row)

            self.assertEqual(row.owner, "alice")
            self.assertIsNone(row.group)
            self.assertTrue(row.is_regular_file)
            self.assertFalse(row.is_directory)
            self.assertEqual(row.size_bytes, 2048)
            self.assertEqual(row.mode_token[0], "-")
            self.assertEqual(row.filename_column, encoded.filename_column)
            self.assertEqual(decode_row(str(root), encoded.line).filename_column, row.filename_column)

    def test_row_from_stat_marks_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            row = row_from_stat(str(root), ".", os.stat(root))

            self.assertTrue(row.is_directory)
            self.assertEqual(row.mode_token[0], "d")
            self.assertIsNone(row.owner)

    def test_normalize_mode_token_treats_special_files_as_regular(self) -> None:
        self.assertEqual(normalize_mode_token(stat.S_IFCHR | 0o644), "-rw-r--r--")
        self.assertEqual(normalize_mode_token(stat.S_IFLNK | 0o777), "-rwxrwxrwx")
        self.assertEqual(normalize_mode_token(stat.S_IFDIR | 0o755), "drwxr-xr-x")


if __name__ == "__main__":
    unittest.main()

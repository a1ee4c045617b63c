"""Tests for directory scanning into listing snapshots and rendering."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from lazydired.listing_model import ListingOptions, build_listing_snapshot, decode_row, render_listing


class BuildListingSnapshotTests(unittest.TestCase):
    def test_snapshot_prepends_synthetic_entries_and_keeps_enumeration_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "a.txt").write_text("a", encoding="utf-8")
            (root / "sub").mkdir()

            snapshot = build_listing_snapshot(root, ListingOptions())

            self.assertEqual(snapshot.directory, str(root))
            self.assertEqual(snapshot.names[:2], [".", ".."])
            self.assertEqual(snapshot.names[2:], os.listdir(root))
            by_name = {row.name: row for row in snapshot.rows}
            self.assertTrue(by_name["sub"].is_directory)
            self.assertTrue(by_name["a.txt"].is_regular_file)
            self.assertFalse(snapshot.truncated)
            self.assertEqual(snapshot.warnings, ())

    def test_snapshot_hides_dotfiles_but_keeps_synthetic_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".env").write_text("x", encoding="utf-8")
            (root / "notes.txt").write_text("n", encoding="utf-8")

            hidden = build_listing_snapshot(root, ListingOptions(show_dotfiles=False))
            shown = build_listing_snapshot(root, ListingOptions(show_dotfiles=True))

            self.assertEqual(sorted(hidden.names), sorted([".", "..", "notes.txt"]))
            self.assertIn(".env", shown.names)

    def test_snapshot_hides_meta_files_case_insensitively(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            for name in ("scene.unity", "scene.unity.meta", "Other.META"):
                (root / name).write_text("x", encoding="utf-8")

            snapshot = build_listing_snapshot(root, ListingOptions(show_meta_files=False))

            self.assertIn("scene.unity", snapshot.names)
            self.assertNotIn("scene.unity.meta", snapshot.names)
            self.assertNotIn("Other.META", snapshot.names)

    def test_snapshot_truncates_to_max_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            for idx in range(5):
                (root / f"f{idx}.txt").write_text("x", encoding="utf-8")

            snapshot = build_listing_snapshot(root, ListingOptions(max_entries=3))
            rendered = render_listing(snapshot)

            self.assertTrue(snapshot.truncated)
            self.assertEqual(len(snapshot.rows), 3)
            self.assertEqual(rendered.splitlines()[-1], "(listing truncated to 3 entries)")

    def test_snapshot_skips_entries_that_cannot_be_stat_ed(self) -> None:
        if not hasattr(os, "symlink"):
            self.skipTest("symlinks unavailable")
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "ok.txt").write_text("x", encoding="utf-8")
            try:
                os.symlink(root / "missing-target", root / "dangling")
            except OSError:
                self.skipTest("cannot create symlinks here")

            snapshot = build_listing_snapshot(root, ListingOptions())

            self.assertIn("ok.txt", snapshot.names)
            self.assertNotIn("dangling", snapshot.names)
            self.assertEqual([warning.path for warning in snapshot.warnings], [str(root / "dangling")])

    def test_snapshot_of_missing_or_non_directory_target_is_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            plain_file = root / "file.txt"
            plain_file.write_text("x", encoding="utf-8")

            for target in (root / "missing", plain_file):
                with self.subTest(target=target):
                    snapshot = build_listing_snapshot(target, ListingOptions())
                    self.assertEqual(snapshot.rows, ())
                    self.assertIsNone(snapshot.captured_at)
                    self.assertEqual(render_listing(snapshot), f"{target}:")

    def test_snapshot_captures_directory_mtime(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "a.txt").write_text("a", encoding="utf-8")

            snapshot = build_listing_snapshot(root, ListingOptions())

            self.assertEqual(snapshot.captured_at, os.stat(root).st_mtime_ns)


class RenderListingTests(unittest.TestCase):
    def test_render_listing_writes_header_then_one_decodable_line_per_row(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "with space.txt").write_text("a", encoding="utf-8")
            (root / "b.txt").write_text("b", encoding="utf-8")

            snapshot = build_listing_snapshot(root, ListingOptions())
            lines = render_listing(snapshot).split("\n")

            self.assertEqual(lines[0], f"{root}:")
            self.assertEqual(len(lines), len(snapshot.rows) + 1)
            for row, line in zip(snapshot.rows, lines[1:]):
                decoded = decode_row(str(root), line)
                self.assertEqual(decoded.name, row.name)
                self.assertEqual(decoded.filename_column, row.filename_column)


if __name__ == "__main__":
    unittest.main()

"""Tests for RemoteEntry."""

import unittest

from remotefs.entry import EntryKind, RemoteEntry


class TestRemoteEntry(unittest.TestCase):
    def setUp(self):
        self.file_entry = RemoteEntry(name="notes.txt", kind=EntryKind.FILE, size=42)
        self.dir_entry = RemoteEntry(name="docs", kind=EntryKind.DIRECTORY)

    def test_kind_properties(self):
        self.assertTrue(self.file_entry.is_file)
        self.assertFalse(self.file_entry.is_directory)
        self.assertTrue(self.dir_entry.is_directory)
        self.assertFalse(self.dir_entry.is_file)

    def test_file_to_dict(self):
        self.assertEqual(
            self.file_entry.to_dict(), {"type": "file", "name": "notes.txt", "size": 42}
        )

    def test_directory_to_dict_omits_size(self):
        """Directories carry no size key at all."""
        self.assertEqual(self.dir_entry.to_dict(), {"type": "dir", "name": "docs"})

    def test_empty_file_keeps_zero_size(self):
        entry = RemoteEntry(name="empty", kind=EntryKind.FILE, size=0)
        self.assertEqual(entry.to_dict()["size"], 0)

    def test_str(self):
        self.assertEqual(str(self.dir_entry), "dir docs")
        self.assertEqual(str(self.file_entry), "file notes.txt")

    def test_entries_are_immutable(self):
        with self.assertRaises(AttributeError):
            self.file_entry.name = "other"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()

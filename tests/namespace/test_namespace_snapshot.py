import io
import json
import os
import tempfile
import unittest

from memfs.errors import SnapshotError
from memfs.models import EntityKind, Folder, TextFile, ZipFile
from memfs.namespace import (
    SNAPSHOT_FORMAT,
    SNAPSHOT_VERSION,
    NamespaceManager,
    dump_registry,
    load_registry,
)


def _build() -> NamespaceManager:
    fsm = NamespaceManager()
    fsm.create("drive", "C")
    fsm.create("folder", "Docs", "C")
    fsm.create("zipfile", "a.zip", "C\\Docs")
    fsm.create("textfile", "n.txt", "C\\Docs\\a.zip")
    fsm.write_to_file("C\\Docs\\a.zip\\n.txt", "zipped")
    fsm.create("textfile", "Hello.txt", "C\\Docs")
    fsm.write_to_file("C\\Docs\\Hello.txt", "hi")
    fsm.create("drive", "D")
    fsm.create("folder", "Empty", "D")
    return fsm


def _by_name(payload: dict) -> dict:
    return {node["name"]: node for node in payload["entities"]}


def _entry(payload: dict, name: str) -> dict:
    return _by_name(payload)[name]


class TestSnapshotCodec(unittest.TestCase):
    def _payload(self) -> dict:
        fsm = _build()
        return json.loads(json.dumps(dump_registry({d.name: d for d in fsm.drives()})))

    def test_dump_shape(self) -> None:
        payload = self._payload()
        self.assertEqual(payload["format"], SNAPSHOT_FORMAT)
        self.assertEqual(payload["version"], SNAPSHOT_VERSION)
        self.assertEqual(
            [node["name"] for node in payload["entities"]],
            ["C", "Docs", "a.zip", "n.txt", "Hello.txt", "D", "Empty"],
        )

        nodes = _by_name(payload)
        self.assertIsNone(nodes["C"]["parent"])
        self.assertEqual(nodes["Docs"]["parent"], nodes["C"]["id"])
        self.assertEqual(nodes["Docs"]["kind"], "folder")
        self.assertEqual(nodes["Hello.txt"]["content"], "hi")
        self.assertEqual(nodes["Hello.txt"]["size"], 2)
        self.assertNotIn("content", nodes["Docs"])

    def test_load_restores_ids_and_timestamps(self) -> None:
        fsm = _build()
        original = {e.path: e for e in fsm.walk()}
        payload = json.loads(json.dumps(dump_registry({d.name: d for d in fsm.drives()})))

        drives = load_registry(payload)

        self.assertEqual(list(drives), ["C", "D"])
        hello = drives["C"].get_child("Docs").get_child("Hello.txt")
        src = original["C\\Docs\\Hello.txt"]
        self.assertIsNot(hello, src)
        self.assertEqual(hello.entity_id, src.entity_id)
        self.assertEqual(hello.created_at, src.created_at)
        self.assertEqual(hello.updated_at, src.updated_at)
        self.assertEqual(hello.content, "hi")
        self.assertEqual(hello.path, "C\\Docs\\Hello.txt")

    def test_load_is_order_independent(self) -> None:
        payload = self._payload()
        payload["entities"].reverse()

        drives = load_registry(payload)

        self.assertEqual(list(drives), ["D", "C"])
        docs = drives["C"].get_child("Docs")
        self.assertEqual([c.name for c in docs.children()], ["Hello.txt", "a.zip"])
        self.assertEqual(docs.get_child("a.zip").get_child("n.txt").content, "zipped")

    def test_load_rejects_bad_envelope(self) -> None:
        for bad in (
            [],
            {"format": "other", "version": 1, "entities": []},
            {"format": SNAPSHOT_FORMAT, "version": 99, "entities": []},
            {"format": SNAPSHOT_FORMAT, "version": SNAPSHOT_VERSION, "entities": {}},
        ):
            with self.subTest(payload=bad):
                with self.assertRaises(SnapshotError):
                    load_registry(bad)

    def test_load_rejects_invariant_violations(self) -> None:
        nested_drive = self._payload()
        _entry(nested_drive, "Empty")["kind"] = "drive"

        folder_in_zip = self._payload()
        _entry(folder_in_zip, "n.txt")["kind"] = "folder"

        duplicate_drive = self._payload()
        _entry(duplicate_drive, "D")["name"] = "C"

        duplicate_id = self._payload()
        _entry(duplicate_id, "D")["id"] = _entry(duplicate_id, "C")["id"]

        top_level_folder = self._payload()
        _entry(top_level_folder, "D")["kind"] = "folder"

        child_of_text_file = self._payload()
        _entry(child_of_text_file, "Empty")["parent"] = _entry(child_of_text_file, "Hello.txt")["id"]

        dangling_parent = self._payload()
        _entry(dangling_parent, "Empty")["parent"] = "no-such-id"

        parent_cycle = self._payload()
        docs = _entry(parent_cycle, "Docs")
        docs["parent"] = _entry(parent_cycle, "a.zip")["id"]

        sibling_clash = self._payload()
        _entry(sibling_clash, "Hello.txt")["name"] = "a.zip"

        bad_time = self._payload()
        _entry(bad_time, "C")["created_at"] = "yesterday"

        missing_key = self._payload()
        del _entry(missing_key, "C")["parent"]

        cases = {
            "nested_drive": nested_drive,
            "folder_in_zip": folder_in_zip,
            "duplicate_drive": duplicate_drive,
            "duplicate_id": duplicate_id,
            "top_level_folder": top_level_folder,
            "child_of_text_file": child_of_text_file,
            "dangling_parent": dangling_parent,
            "parent_cycle": parent_cycle,
            "sibling_clash": sibling_clash,
            "bad_time": bad_time,
            "missing_key": missing_key,
        }
        for label, case in cases.items():
            with self.subTest(case=label):
                with self.assertRaises(SnapshotError):
                    load_registry(case)


class TestManagerPersistence(unittest.TestCase):
    def test_save_and_load_path_round_trip(self) -> None:
        fsm = _build()
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "fs.json")
            fsm.save_to_disk(path)
            self.assertEqual(
                [name for name in os.listdir(tmp)],
                ["fs.json"],
            )

            restored = NamespaceManager()
            restored.load_from_disk(path)

        self.assertEqual(
            [e.path for e in restored.walk()],
            [e.path for e in fsm.walk()],
        )
        self.assertEqual(restored.read_file("C\\Docs\\a.zip\\n.txt"), "zipped")
        self.assertIsInstance(restored.resolve("C\\Docs\\a.zip"), ZipFile)
        self.assertEqual(restored.stat("D\\Empty").kind, EntityKind.FOLDER)

    def test_save_and_load_file_object(self) -> None:
        fsm = _build()
        buf = io.StringIO()
        fsm.save_to_disk(buf)

        restored = NamespaceManager()
        restored.load_from_disk(io.StringIO(buf.getvalue()))
        self.assertEqual(restored.search("Hello.txt"), ["C\\Docs\\Hello.txt"])

    def test_load_replaces_instead_of_merging(self) -> None:
        buf = io.StringIO()
        _build().save_to_disk(buf)

        fsm = NamespaceManager()
        fsm.create("drive", "X")
        fsm.create("drive", "C")
        fsm.create("folder", "Stale", "C")
        fsm.load_from_disk(io.StringIO(buf.getvalue()))

        self.assertEqual([d.name for d in fsm.drives()], ["C", "D"])
        self.assertFalse(fsm.exists("C\\Stale"))

    def test_failed_load_keeps_current_state(self) -> None:
        fsm = _build()
        with self.assertRaises(SnapshotError):
            fsm.load_from_disk(io.StringIO("{not json"))
        with self.assertRaises(SnapshotError):
            fsm.load_from_disk(io.StringIO(json.dumps({"format": "x"})))
        self.assertEqual(fsm.read_file("C\\Docs\\Hello.txt"), "hi")

    def test_load_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(SnapshotError) as ctx:
                NamespaceManager().load_from_disk(os.path.join(tmp, "missing.json"))
        self.assertIsInstance(ctx.exception.cause, OSError)

    def test_save_to_missing_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(SnapshotError):
                _build().save_to_disk(os.path.join(tmp, "nope", "fs.json"))

    def test_copy_after_load_gets_fresh_ids(self) -> None:
        buf = io.StringIO()
        _build().save_to_disk(buf)
        fsm = NamespaceManager()
        fsm.load_from_disk(io.StringIO(buf.getvalue()))

        clone = fsm.copy("C\\Docs", "D\\Empty")
        self.assertNotEqual(clone.entity_id, fsm.resolve("C\\Docs").entity_id)

    def test_deeply_nested_round_trip(self) -> None:
        depth = 1200
        fsm = NamespaceManager()
        node = fsm.create("drive", "C")
        for _ in range(depth):
            child = Folder("f", node)
            node.add_child(child)
            node = child
        leaf = TextFile("leaf.txt", node)
        node.add_child(leaf)
        leaf.set_content("bottom")

        buf = io.StringIO()
        fsm.save_to_disk(buf)
        restored = NamespaceManager()
        restored.load_from_disk(io.StringIO(buf.getvalue()))

        entities = restored.walk()
        self.assertEqual(len(entities), depth + 2)
        self.assertEqual(entities[-1].content, "bottom")
        self.assertEqual(entities[-1].path, leaf.path)
        self.assertEqual(restored.search("leaf.txt"), [leaf.path])


if __name__ == "__main__":
    unittest.main()

import errno
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from smplinfo.format import FormatString
from smplinfo.midi import Note
from smplinfo.models import read_sample
from smplinfo.processor import BatchOptions, BatchProcessor, DryRunRecorder

from wav_fixtures import data_chunk, fmt_chunk, smpl_chunk, write_wav


class TestBatchProcessor(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_inspect_only_leaves_file_untouched(self) -> None:
        path = write_wav(self.tmp / "a.wav", fmt_chunk(), smpl_chunk(60), data_chunk())
        original = path.read_bytes()
        result = BatchProcessor(BatchOptions()).process_path(path)
        self.assertTrue(result.ok)
        self.assertEqual(result.old_note, Note(60))
        self.assertIsNone(result.new_note)
        self.assertEqual(result.status, "UNCHANGED")
        self.assertEqual(path.read_bytes(), original)

    def test_sets_explicit_note(self) -> None:
        path = write_wav(self.tmp / "a.wav")
        result = BatchProcessor(BatchOptions(note=Note(64))).process_path(path)
        self.assertTrue(result.ok)
        self.assertIsNone(result.old_note)
        self.assertEqual(result.new_note, Note(64))
        self.assertEqual(result.status, "UPDATED")
        self.assertEqual(read_sample(path).note, Note(64))

    def test_same_note_is_not_rewritten(self) -> None:
        path = write_wav(self.tmp / "a.wav", fmt_chunk(), smpl_chunk(64))
        result = BatchProcessor(BatchOptions(note=Note(64))).process_path(path)
        self.assertIsNone(result.new_note)
        self.assertEqual(result.status, "UNCHANGED")
        self.assertIn("note already E3", result.notes)

    def test_atomic_mode_sets_note(self) -> None:
        path = write_wav(self.tmp / "a.wav", fmt_chunk(), smpl_chunk(10))
        result = BatchProcessor(BatchOptions(note=Note(11), atomic=True)).process_path(path)
        self.assertTrue(result.ok)
        self.assertEqual(read_sample(path).note, Note(11))

    def test_note_from_filename(self) -> None:
        good = write_wav(self.tmp / "kick_C3_v2.wav")
        ambiguous = write_wav(self.tmp / "pad_C3_E3.wav")
        processor = BatchProcessor(BatchOptions(note_from_filename=True))

        result = processor.process_path(good)
        self.assertEqual(result.new_note, Note(60))
        self.assertEqual(read_sample(good).note, Note(60))

        result = processor.process_path(ambiguous)
        self.assertTrue(result.ok)
        self.assertIsNone(result.new_note)
        self.assertIn("no unambiguous note in filename", result.notes)
        self.assertIsNone(read_sample(ambiguous).note)

    def test_dry_run_changes_nothing(self) -> None:
        path = write_wav(self.tmp / "kick.wav")
        original = path.read_bytes()
        options = BatchOptions(
            note=Note(60), template=FormatString.parse("kick_%n"), dry_run=True
        )
        result = BatchProcessor(options).process_path(path)
        self.assertEqual(result.status, "PLANNED")
        self.assertEqual(result.new_note, Note(60))
        self.assertEqual(result.renamed_to, self.tmp / "kick_C3.wav")
        self.assertTrue(path.exists())
        self.assertFalse((self.tmp / "kick_C3.wav").exists())
        self.assertEqual(path.read_bytes(), original)

    def test_set_and_rename_uses_new_note(self) -> None:
        path = write_wav(self.tmp / "kick.wav", fmt_chunk(), smpl_chunk(48))
        options = BatchOptions(note=Note(62), template=FormatString.parse("kick_%m"))
        result = BatchProcessor(options).process_path(path)
        target = self.tmp / "kick_062.wav"
        self.assertEqual(result.renamed_to, target)
        self.assertFalse(path.exists())
        self.assertEqual(read_sample(target).note, Note(62))

    def test_rename_skipped_when_name_unchanged(self) -> None:
        path = write_wav(self.tmp / "kick_C3.wav", fmt_chunk(), smpl_chunk(60))
        options = BatchOptions(template=FormatString.parse("kick_%n"))
        result = BatchProcessor(options).process_path(path)
        self.assertIsNone(result.renamed_to)
        self.assertIn("name unchanged", result.notes)
        self.assertTrue(path.exists())

    def test_rename_refuses_to_overwrite(self) -> None:
        path = write_wav(self.tmp / "a.wav", fmt_chunk(), smpl_chunk(60))
        existing = write_wav(self.tmp / "C3.wav")
        result = BatchProcessor(BatchOptions(template=FormatString.parse("%n"))).process_path(path)
        self.assertFalse(result.ok)
        self.assertEqual(result.error_kind, "Io")
        self.assertTrue(path.exists())
        self.assertIsNone(read_sample(existing).note)

    def test_unreadable_files_fail_individually(self) -> None:
        write_wav(self.tmp / "a.wav")
        (self.tmp / "b.wav").write_bytes(b"not a wav file at all")
        write_wav(self.tmp / "c.wav")
        processor = BatchProcessor(BatchOptions(note=Note(60)))

        report = processor.run([self.tmp, self.tmp / "missing.wav"])

        self.assertEqual(len(report.results), 4)
        self.assertFalse(report.ok)
        kinds = {r.path.name: r.error_kind for r in report.failures}
        self.assertEqual(kinds, {"b.wav": "NotAContainer", "missing.wav": "Io"})
        self.assertEqual(read_sample(self.tmp / "a.wav").note, Note(60))
        self.assertEqual(read_sample(self.tmp / "c.wav").note, Note(60))

    def test_unlistable_directory_fails_and_batch_continues(self) -> None:
        locked = self.tmp / "locked"
        locked.mkdir()
        write_wav(locked / "hidden.wav")
        good = write_wav(self.tmp / "good.wav")
        real_iterdir = Path.iterdir

        def iterdir(path):
            if path == locked:
                raise PermissionError(errno.EACCES, "Permission denied", str(path))
            return real_iterdir(path)

        processor = BatchProcessor(BatchOptions(note=Note(60)))
        with mock.patch.object(Path, "iterdir", iterdir):
            report = processor.run([locked, good])

        self.assertEqual([r.path for r in report.results], [locked, good])
        self.assertEqual(report.results[0].error_kind, "Io")
        self.assertTrue(report.results[1].ok)
        self.assertEqual(read_sample(good).note, Note(60))

    def test_matching_note_never_opens_for_writing(self) -> None:
        path = write_wav(self.tmp / "a.wav", fmt_chunk(), smpl_chunk(60), data_chunk())
        real_open = Path.open

        def read_only_open(self_path, mode="r", *args, **kwargs):
            if "+" in mode or "w" in mode:
                raise PermissionError(errno.EACCES, "Permission denied", str(self_path))
            return real_open(self_path, mode, *args, **kwargs)

        with mock.patch.object(Path, "open", read_only_open):
            result = BatchProcessor(BatchOptions(note=Note(60))).process_path(path)

        self.assertTrue(result.ok)
        self.assertEqual(result.status, "UNCHANGED")
        self.assertIn("note already C3", result.notes)

    def test_rename_without_note_warns(self) -> None:
        path = write_wav(self.tmp / "a.wav")
        options = BatchOptions(template=FormatString.parse("pad_%n"))
        with self.assertLogs("smplinfo.processor", level="WARNING"):
            result = BatchProcessor(options).process_path(path)
        self.assertTrue(result.ok)
        self.assertIn("no root note to render", result.notes)
        self.assertEqual(result.renamed_to, self.tmp / "pad_.wav")

    def test_recursive_run(self) -> None:
        sub = self.tmp / "sub"
        sub.mkdir()
        write_wav(self.tmp / "a.wav")
        write_wav(sub / "b.wav")
        processor = BatchProcessor(BatchOptions())
        self.assertEqual(len(processor.run([self.tmp]).results), 1)
        self.assertEqual(len(processor.run([self.tmp], recursive=True).results), 2)

    def test_recorder_writes_json_lines(self) -> None:
        path = write_wav(self.tmp / "a.wav")
        output = self.tmp / "out" / "plan.jsonl"
        processor = BatchProcessor(
            BatchOptions(note=Note(60), dry_run=True), recorder=DryRunRecorder(output)
        )
        processor.run([path])
        lines = output.read_text(encoding="utf-8").splitlines()
        self.assertEqual(len(lines), 1)
        payload = json.loads(lines[0])
        self.assertEqual(payload["status"], "planned")
        self.assertEqual(payload["new_note"], {"value": 60, "name": "C3"})
        self.assertIsNone(payload["old_note"])


if __name__ == "__main__":
    unittest.main()

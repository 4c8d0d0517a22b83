import unittest
from pathlib import Path

from smplinfo.heuristics import extract_note_from_filename, note_candidates
from smplinfo.midi import Note


class TestExtractNote(unittest.TestCase):
    def test_single_token(self) -> None:
        self.assertEqual(extract_note_from_filename("kick_C3_v2.wav"), Note(60))
        self.assertEqual(extract_note_from_filename("Piano F#4.wav"), Note(78))
        self.assertEqual(extract_note_from_filename("C3.wav"), Note(60))
        self.assertEqual(extract_note_from_filename("bass-C-1.wav"), Note(12))

    def test_accepts_paths(self) -> None:
        self.assertEqual(extract_note_from_filename(Path("/samples/E2/pad_A2.wav")), Note(57))

    def test_no_token(self) -> None:
        self.assertIsNone(extract_note_from_filename("a_b.wav"))
        self.assertIsNone(extract_note_from_filename("snare.wav"))

    def test_multiple_tokens_abstain(self) -> None:
        self.assertIsNone(extract_note_from_filename("pad_C3_E3.wav"))
        self.assertIsNone(extract_note_from_filename("pad_C3_C3.wav"))

    def test_tokens_must_be_delimited(self) -> None:
        self.assertIsNone(extract_note_from_filename("ABC3.wav"))
        self.assertIsNone(extract_note_from_filename("C3x.wav"))
        self.assertEqual(extract_note_from_filename("take2_D3.wav"), Note(62))

    def test_lowercase_is_not_a_note(self) -> None:
        self.assertIsNone(extract_note_from_filename("kick_c3.wav"))

    def test_out_of_range_tokens_are_ignored(self) -> None:
        self.assertEqual(note_candidates("G99_C3.wav"), [Note(60)])
        self.assertEqual(extract_note_from_filename("G99_C3.wav"), Note(60))


if __name__ == "__main__":
    unittest.main()

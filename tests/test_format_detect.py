"""Tests for DOL signature detection.

The DOL format has no magic number; these tests pin down the exact
12-byte heuristic and its boundary behaviour.
"""

from pathlib import Path

import pytest

from dolfile.format_detect import (
    check_buffer,
    detect_dol_format,
    is_dol_binary,
    SignatureMismatch,
    DOL_SIGNATURE_HEAD,
    DOL_SIGNATURE_TAIL,
)


GOOD_HEAD = DOL_SIGNATURE_HEAD
GOOD_TAIL = DOL_SIGNATURE_TAIL
BAD_HEAD = b"\x00\x00\x02\x00\x00\x00"
BAD_TAIL = b"\x00\x00\x00\x00\x00\x01"


class TestCheckBuffer:
    """Tests for check_buffer."""

    @pytest.mark.parametrize(
        "head,tail,expected",
        [
            (GOOD_HEAD, GOOD_TAIL, True),
            (GOOD_HEAD, BAD_TAIL, False),
            (BAD_HEAD, GOOD_TAIL, False),
            (BAD_HEAD, BAD_TAIL, False),
        ],
        ids=["head-ok-tail-ok", "head-ok-tail-bad", "head-bad-tail-ok", "both-bad"],
    )
    def test_signature_combinations(self, head: bytes, tail: bytes, expected: bool):
        """Only a matching head followed by a matching tail is accepted."""
        assert check_buffer(head + tail + b"\xff" * 244) is expected

    def test_exactly_twelve_bytes(self):
        """Twelve signature bytes with nothing after are enough."""
        assert check_buffer(GOOD_HEAD + GOOD_TAIL) is True

    @pytest.mark.parametrize("length", [0, 1, 5, 6, 7, 11])
    def test_short_buffer_rejected(self, length: int):
        """Any buffer shorter than 12 bytes is rejected."""
        assert check_buffer((GOOD_HEAD + GOOD_TAIL)[:length]) is False

    def test_trailing_bytes_ignored(self):
        """Bytes past offset 12 do not influence the verdict."""
        assert check_buffer(GOOD_HEAD + GOOD_TAIL + b"\x12\x34\x56\x78") is True

    def test_accepts_bytearray_and_memoryview(self):
        """Mutable and view buffers are accepted like bytes."""
        data = GOOD_HEAD + GOOD_TAIL
        assert check_buffer(bytearray(data)) is True
        assert check_buffer(memoryview(data)) is True

    def test_minimal_image_detected(self, minimal_image: bytes):
        """A DOL whose first text segment sits right after the header is detected."""
        assert check_buffer(minimal_image) is True

    def test_valid_image_with_second_text_offset_not_detected(
        self, multi_segment_image: bytes
    ):
        """A valid DOL can still fail the heuristic (low half of text_1 offset)."""
        assert check_buffer(multi_segment_image) is False

    def test_elf_rejected(self):
        """ELF magic does not match the signature."""
        assert check_buffer(b"\x7fELF" + b"\x00" * 60) is False


class TestDetectDolFormat:
    """Tests for detect_dol_format."""

    def test_detect_dol(self, minimal_dol: Path):
        """A DOL file on disk is detected."""
        assert detect_dol_format(minimal_dol) == "dol"

    def test_small_file_raises(self, tmp_path: Path):
        """Files shorter than the signature raise SignatureMismatch."""
        small = tmp_path / "small.dol"
        small.write_bytes(GOOD_HEAD)

        with pytest.raises(SignatureMismatch, match="File too small"):
            detect_dol_format(small)

    def test_bad_signature_raises(self, tmp_path: Path):
        """Files without the signature raise SignatureMismatch."""
        text_file = tmp_path / "readme.dol"
        text_file.write_text("This is a plain text file, not a binary.")

        with pytest.raises(SignatureMismatch, match="does not carry the DOL signature"):
            detect_dol_format(text_file)

    def test_nonexistent_file_raises(self, tmp_path: Path):
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            detect_dol_format(tmp_path / "does_not_exist.dol")

    def test_signature_mismatch_is_value_error(self):
        """SignatureMismatch can be caught as ValueError."""
        assert issubclass(SignatureMismatch, ValueError)


class TestIsDolBinary:
    """Tests for is_dol_binary."""

    def test_true_for_dol(self, minimal_dol: Path):
        assert is_dol_binary(minimal_dol) is True

    def test_false_for_missing_file(self, tmp_path: Path):
        assert is_dol_binary(tmp_path / "does_not_exist.dol") is False

    def test_false_for_text_file(self, tmp_path: Path):
        text_file = tmp_path / "readme.txt"
        text_file.write_text("Not a binary")
        assert is_dol_binary(text_file) is False

    def test_ignores_file_name(self, minimal_image: bytes, tmp_path: Path):
        """Detection looks at bytes only; the .dol suffix is a loader concern."""
        other = tmp_path / "image.bin"
        other.write_bytes(minimal_image)
        assert is_dol_binary(other) is True

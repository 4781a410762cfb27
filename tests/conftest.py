import pytest
import pathlib

from dol_test_utils import make_dol_image, write_dol


# Single text segment directly after the header, plus bss
TEXT0_OFFSET = 0x100
TEXT0_ADDR = 0x80003100
TEXT0_SIZE = 0x2000
BSS_ADDR = 0x80010000
BSS_SIZE = 0x4000
ENTRYPOINT = 0x80003100


@pytest.fixture
def minimal_image() -> bytes:
    """DOL with text_0 at 0x100 -> 0x80003100 (0x2000 bytes) and a 0x4000 bss."""
    return make_dol_image(
        text=[(TEXT0_OFFSET, TEXT0_ADDR, b"\x60\x00\x00\x00" * (TEXT0_SIZE // 4))],
        bss=(BSS_ADDR, BSS_SIZE),
        entrypoint=ENTRYPOINT,
    )


@pytest.fixture
def multi_segment_image() -> bytes:
    """DOL with two text and two data segments laid out back to back."""
    return make_dol_image(
        text=[
            (0x100, 0x80003100, b"\x60\x00\x00\x00" * 0x40),
            (0x200, 0x80004000, b"\x4e\x80\x00\x20" * 0x20),
        ],
        data=[
            (0x280, 0x80005000, b"\xaa" * 0x80),
            (0x300, 0x80006000, b"\xbb" * 0x40),
        ],
        bss=(0x80007000, 0x1000),
        entrypoint=0x80003100,
    )


@pytest.fixture
def minimal_dol(minimal_image: bytes, tmp_path: pathlib.Path) -> pathlib.Path:
    """minimal_image written to disk as main.dol."""
    return write_dol(tmp_path / "main.dol", minimal_image)

"""
DOL format detection utilities.

DOL images carry no magic number. Detection relies on a heuristic over the
first 12 header bytes: the first text segment's file offset is 0x100 (right
after the header) and the upper bytes of the first data offset are zero.
Crafted or unusual images can defeat this check; that is a limitation of
the format, not of the detector.
"""

from pathlib import Path


# First 6 bytes: text0 file offset == 0x100, upper half of text1 offset zero
DOL_SIGNATURE_HEAD = b"\x00\x00\x01\x00\x00\x00"
# Next 6 bytes must all be zero
DOL_SIGNATURE_TAIL = b"\x00\x00\x00\x00\x00\x00"

DOL_SIGNATURE_SIZE = len(DOL_SIGNATURE_HEAD) + len(DOL_SIGNATURE_TAIL)


class SignatureMismatch(ValueError):
    """Raised when data does not carry the DOL byte signature."""

    pass


def check_buffer(data: bytes | bytearray | memoryview) -> bool:
    """Check whether a byte buffer looks like a DOL image.

    Args:
        data: Buffer holding (at least the start of) the image

    Returns:
        True if both signature windows match, False otherwise
    """
    head = bytes(data[0:6])
    if len(head) != 6 or head != DOL_SIGNATURE_HEAD:
        return False

    tail = bytes(data[6:12])
    if len(tail) != 6:
        return False
    return tail == DOL_SIGNATURE_TAIL


def detect_dol_format(path: Path) -> str:
    """Detect whether a file on disk is a DOL image.

    Args:
        path: Path to binary file

    Returns:
        "dol" for DOL images

    Raises:
        SignatureMismatch: If the file does not carry the DOL signature
        FileNotFoundError: If the file doesn't exist
    """
    with open(path, "rb") as f:
        header = f.read(DOL_SIGNATURE_SIZE)

    if len(header) < DOL_SIGNATURE_SIZE:
        raise SignatureMismatch(f"File too small to be a DOL image: {path}")

    if not check_buffer(header):
        raise SignatureMismatch(f"Binary does not carry the DOL signature: {path}")

    return "dol"


def is_dol_binary(path: Path) -> bool:
    """Check if a file is a DOL image.

    Args:
        path: Path to binary file

    Returns:
        True if DOL, False otherwise
    """
    try:
        return detect_dol_format(path) == "dol"
    except (SignatureMismatch, FileNotFoundError):
        return False

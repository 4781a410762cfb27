"""
DOL type definitions for GameCube/Wii executables.

A DOL image starts with a fixed 0x100 byte header of 64 big-endian 32-bit
words, followed directly by segment data. There is no magic number and no
versioning - every DOL uses exactly this layout.

Header layout:
  Offset      | Size | Field
  ------------|------|------
  0x00-0x1B   | 28   | File offsets for Text0..6
  0x1C-0x47   | 44   | File offsets for Data0..10
  0x48-0x63   | 28   | Load addresses for Text0..6
  0x64-0x8F   | 44   | Load addresses for Data0..10
  0x90-0xAB   | 28   | Sizes for Text0..6
  0xAC-0xD7   | 44   | Sizes for Data0..10
  0xD8-0xDB   | 4    | BSS address
  0xDC-0xDF   | 4    | BSS size
  0xE0-0xE3   | 4    | Entry point
  0xE4-0xFF   | 28   | Padding
"""

import struct
from dataclasses import dataclass
from typing import ClassVar

# =============================================================================
# Constants
# =============================================================================

DOL_HEADER_SIZE = 0x100
DOL_NUM_TEXT = 7
DOL_NUM_DATA = 11
DOL_NUM_PADDING = 7

# Load base reported for every image. Not derived from the header.
# TODO: derive from the lowest present segment address once hosts stop
# relying on the fixed value.
DOL_LOAD_BASE = 0x80B00000

# Main memory window (MEM1, cached) that DOL segments normally load into
DOL_MEM1_START = 0x80000000
DOL_MEM1_END = 0x81800000

# Entry point "physical" address is the low 16 bits of the virtual address
ENTRY_PADDR_MASK = 0xFFFF

# Section permissions
PERM_X = 0x1  # Execute
PERM_W = 0x2  # Write
PERM_R = 0x4  # Read

PERM_TEXT = PERM_R | PERM_X
PERM_DATA = PERM_R
PERM_BSS = PERM_R | PERM_W

# Static image metadata
DOL_ARCH = "ppc"
DOL_BITS = 32
DOL_MACHINE = "Nintendo Wii"
DOL_OS = "wii-ios"
DOL_TYPE = "ROM"


# =============================================================================
# DOL Structures
# =============================================================================


@dataclass(frozen=True)
class DolHeader:
    """DOL file header.

    Text and data slots are parallel arrays: slot ``i`` is described by
    ``text_paddr[i]``, ``text_vaddr[i]`` and ``text_size[i]``. A slot is
    present only when both its file offset and load address are non-zero.

    The header is immutable once parsed; derived sections copy out of it.
    """

    text_paddr: tuple[int, ...]  # 7 file offsets
    data_paddr: tuple[int, ...]  # 11 file offsets
    text_vaddr: tuple[int, ...]  # 7 load addresses
    data_vaddr: tuple[int, ...]  # 11 load addresses
    text_size: tuple[int, ...]  # 7 sizes
    data_size: tuple[int, ...]  # 11 sizes
    bss_addr: int
    bss_size: int
    entrypoint: int
    padding: tuple[int, ...] = (0,) * DOL_NUM_PADDING

    # 57 header words + 7 padding words, no alignment padding
    STRUCT_FMT: ClassVar[str] = ">64I"
    SIZE: ClassVar[int] = DOL_HEADER_SIZE

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> "DolHeader":
        """Parse DOL header from binary data.

        Args:
            data: At least 256 bytes starting at the beginning of the image

        Returns:
            Parsed DolHeader

        Raises:
            ValueError: If data is shorter than the header
        """
        if len(data) < cls.SIZE:
            raise ValueError(
                f"Data too short for DOL header: {len(data)} < {cls.SIZE}"
            )

        words = struct.unpack_from(cls.STRUCT_FMT, data, 0)

        pos = 0

        def take(count: int) -> tuple[int, ...]:
            nonlocal pos
            chunk = tuple(words[pos : pos + count])
            pos += count
            return chunk

        text_paddr = take(DOL_NUM_TEXT)
        data_paddr = take(DOL_NUM_DATA)
        text_vaddr = take(DOL_NUM_TEXT)
        data_vaddr = take(DOL_NUM_DATA)
        text_size = take(DOL_NUM_TEXT)
        data_size = take(DOL_NUM_DATA)
        bss_addr, bss_size, entrypoint = take(3)
        padding = take(DOL_NUM_PADDING)

        return cls(
            text_paddr=text_paddr,
            data_paddr=data_paddr,
            text_vaddr=text_vaddr,
            data_vaddr=data_vaddr,
            text_size=text_size,
            data_size=data_size,
            bss_addr=bss_addr,
            bss_size=bss_size,
            entrypoint=entrypoint,
            padding=padding,
        )

    def has_text(self, index: int) -> bool:
        """Check if text slot ``index`` describes a present segment."""
        return bool(self.text_paddr[index] and self.text_vaddr[index])

    def has_data(self, index: int) -> bool:
        """Check if data slot ``index`` describes a present segment."""
        return bool(self.data_paddr[index] and self.data_vaddr[index])


@dataclass(frozen=True)
class Section:
    """A loadable region derived from the DOL header."""

    name: str
    file_offset: int
    load_address: int
    size: int
    vsize: int
    permissions: int  # PERM_* flags
    should_map: bool = True

    @property
    def end_offset(self) -> int:
        """File offset of end of section content."""
        return self.file_offset + self.size

    @property
    def end_address(self) -> int:
        """Load address of end of section."""
        return self.load_address + self.vsize

    @property
    def perm_string(self) -> str:
        """Permissions in ``rwx`` notation, e.g. ``r-x``."""
        return "".join(
            char if self.permissions & flag else "-"
            for char, flag in (("r", PERM_R), ("w", PERM_W), ("x", PERM_X))
        )

    def contains_address(self, addr: int) -> bool:
        """Check if a load address falls within this section."""
        return self.load_address <= addr < self.end_address


@dataclass(frozen=True)
class EntryPoint:
    """Program entry point."""

    virtual_address: int
    physical_address: int


@dataclass(frozen=True)
class BinInfo:
    """Static metadata reported for every DOL image."""

    file: str
    type: str = DOL_TYPE
    machine: str = DOL_MACHINE
    os: str = DOL_OS
    arch: str = DOL_ARCH
    bits: int = DOL_BITS
    big_endian: bool = True
    has_va: bool = True

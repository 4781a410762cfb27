"""
DOL header loading and segment derivation.

DolBinary parses the header once and answers every later query from the
cached record. Section, entry and info records are rebuilt on each call and
never alias the header.

Loading enforces two gates, independently of the byte-signature detector:
- the buffer must hold a full 0x100 byte header
- the source name must end in ".dol" (case-insensitive)

Usage:
    binary = DolBinary.load(Path("main.dol"))
    for section in binary.sections():
        print(section.name, hex(section.load_address))
"""

import logging
import struct
from pathlib import Path

from .types import (
    DOL_HEADER_SIZE,
    DOL_LOAD_BASE,
    DOL_NUM_DATA,
    DOL_NUM_TEXT,
    ENTRY_PADDR_MASK,
    PERM_BSS,
    PERM_DATA,
    PERM_TEXT,
    BinInfo,
    DolHeader,
    EntryPoint,
    Section,
)

logger = logging.getLogger(__name__)

DOL_EXTENSION = ".dol"


class DolLoadError(ValueError):
    """Base class for failures while loading a DOL header."""

    pass


class BufferTooSmall(DolLoadError):
    """Raised when the buffer cannot hold the 0x100 byte header."""

    pass


class NameMismatch(DolLoadError):
    """Raised when the source name does not end in ".dol"."""

    pass


class TruncatedRead(DolLoadError):
    """Raised when the header read comes up short after the size check passed.

    This indicates an internal fault rather than bad input.
    """

    pass


def has_dol_extension(name: str) -> bool:
    """Check if a source name ends in ".dol", ignoring case."""
    return name.lower().endswith(DOL_EXTENSION)


def build_sections(header: DolHeader) -> list[Section]:
    """Derive loadable sections from a parsed header.

    Present text slots come first, then present data slots, both by
    ascending index. A single bss section is always appended last, even
    when its address and size are zero.

    Args:
        header: Parsed DOL header

    Returns:
        Ordered list of sections
    """
    sections = []

    for i in range(DOL_NUM_TEXT):
        if not header.has_text(i):
            continue
        sections.append(
            Section(
                name=f"text_{i}",
                file_offset=header.text_paddr[i],
                load_address=header.text_vaddr[i],
                size=header.text_size[i],
                vsize=header.text_size[i],
                permissions=PERM_TEXT,
            )
        )

    for i in range(DOL_NUM_DATA):
        if not header.has_data(i):
            continue
        sections.append(
            Section(
                name=f"data_{i}",
                file_offset=header.data_paddr[i],
                load_address=header.data_vaddr[i],
                size=header.data_size[i],
                vsize=header.data_size[i],
                permissions=PERM_DATA,
            )
        )

    # BSS has no file backing
    sections.append(
        Section(
            name="bss",
            file_offset=0,
            load_address=header.bss_addr,
            size=header.bss_size,
            vsize=header.bss_size,
            permissions=PERM_BSS,
        )
    )

    return sections


def build_entries(header: DolHeader) -> list[EntryPoint]:
    """Return the single entry point of the image."""
    vaddr = header.entrypoint
    return [
        EntryPoint(virtual_address=vaddr, physical_address=vaddr & ENTRY_PADDR_MASK)
    ]


def build_info(name: str) -> BinInfo:
    """Return static image metadata tagged with the source name."""
    return BinInfo(file=name)


class DolBinary:
    """A loaded DOL image.

    Construct through load() or load_buffer(); the header is parsed exactly
    once and kept for the lifetime of the object.
    """

    def __init__(self, header: DolHeader, name: str, size: int):
        self.header = header
        self.name = name
        self.size = size

    @classmethod
    def load(cls, path: Path) -> "DolBinary":
        """Load a DOL image from disk.

        Args:
            path: Path to the .dol file

        Returns:
            Loaded DolBinary

        Raises:
            BufferTooSmall: If the file is shorter than the header
            NameMismatch: If the path does not end in ".dol"
            TruncatedRead: If the header could not be read in full
            FileNotFoundError: If the file doesn't exist
        """
        data = Path(path).read_bytes()
        return cls.load_buffer(data, str(path))

    @classmethod
    def load_buffer(
        cls, data: bytes | bytearray | memoryview, name: str
    ) -> "DolBinary":
        """Load a DOL image from an in-memory buffer.

        Args:
            data: Image bytes
            name: Source file name, checked for the ".dol" suffix

        Returns:
            Loaded DolBinary

        Raises:
            BufferTooSmall: If data is shorter than the header
            NameMismatch: If name does not end in ".dol"
            TruncatedRead: If the header could not be read in full
        """
        size = len(data)
        if size < DOL_HEADER_SIZE:
            logger.debug(
                "Rejecting %s: %d bytes is smaller than DOL header (%d)",
                name,
                size,
                DOL_HEADER_SIZE,
            )
            raise BufferTooSmall(
                f"Buffer too small for DOL header: {size} < {DOL_HEADER_SIZE}"
            )

        if not has_dol_extension(name):
            logger.debug("Rejecting %s: name does not end in %s", name, DOL_EXTENSION)
            raise NameMismatch(f"Not a {DOL_EXTENSION} file: {name}")

        try:
            header = DolHeader.from_bytes(data[:DOL_HEADER_SIZE])
        except (ValueError, struct.error) as e:
            raise TruncatedRead(f"Failed to read DOL header from {name}: {e}") from e

        logger.debug(
            "Loaded DOL header from %s: entry=0x%08x bss=0x%08x+0x%x",
            name,
            header.entrypoint,
            header.bss_addr,
            header.bss_size,
        )
        return cls(header, name, size)

    def sections(self) -> list[Section]:
        """Loadable sections, text then data then bss."""
        return build_sections(self.header)

    def entries(self) -> list[EntryPoint]:
        return build_entries(self.header)

    def info(self) -> BinInfo:
        return build_info(self.name)

    def baddr(self) -> int:
        """Load base of the image.

        Always DOL_LOAD_BASE; the header has no field for it.
        """
        return DOL_LOAD_BASE

    def find_section(self, name: str) -> Section | None:
        """Find section by name."""
        for section in self.sections():
            if section.name == name:
                return section
        return None

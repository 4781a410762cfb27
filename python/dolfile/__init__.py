"""
dolfile: GameCube/Wii DOL executable detection and header parsing.

This package recognises DOL images, parses their fixed 0x100 byte header
and derives the loadable sections, entry point and static image metadata.
It is read-only: nothing here writes DOL files.

    from dolfile import DolBinary, check_buffer

    if check_buffer(data):
        binary = DolBinary.load_buffer(data, "main.dol")
        sections = binary.sections()

Binary-analysis hosts integrate through the format handler interface:

    from dolfile.plugin import default_registry

    registry = default_registry()
    plugin = registry.find_plugin(data)
"""

from .format_detect import (
    check_buffer,
    detect_dol_format,
    is_dol_binary,
    SignatureMismatch,
)
from .loader import (
    DolBinary,
    DolLoadError,
    BufferTooSmall,
    NameMismatch,
    TruncatedRead,
    build_sections,
    build_entries,
    build_info,
)
from .plugin import (
    BinPlugin,
    DolPlugin,
    PluginRegistry,
    default_registry,
)
from .types import (
    DolHeader,
    Section,
    EntryPoint,
    BinInfo,
    DOL_HEADER_SIZE,
    DOL_LOAD_BASE,
    PERM_R,
    PERM_W,
    PERM_X,
)

__all__ = [
    # Format detection
    "check_buffer",
    "detect_dol_format",
    "is_dol_binary",
    "SignatureMismatch",
    # Loading
    "DolBinary",
    "DolLoadError",
    "BufferTooSmall",
    "NameMismatch",
    "TruncatedRead",
    "build_sections",
    "build_entries",
    "build_info",
    # Host integration
    "BinPlugin",
    "DolPlugin",
    "PluginRegistry",
    "default_registry",
    # Structs
    "DolHeader",
    "Section",
    "EntryPoint",
    "BinInfo",
    # Constants
    "DOL_HEADER_SIZE",
    "DOL_LOAD_BASE",
    "PERM_R",
    "PERM_W",
    "PERM_X",
]

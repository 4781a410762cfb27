"""
MessagePack metadata reports for loaded DOL images.

A report captures everything the loader derives - info, load base, entry
points and sections - so other tools can consume it without re-parsing the
image. This serialises derived metadata only; it is not a DOL writer.

Report structure:
    {
        "info": {"file": ..., "type": "ROM", "arch": "ppc", ...},
        "baddr": 0x80B00000,
        "entries": [{"vaddr": ..., "paddr": ...}],
        "sections": [
            {"name": "text_0", "paddr": ..., "vaddr": ..., "size": ...,
             "vsize": ..., "perm": "r-x", "add": True},
            ...
        ],
    }
"""

from dataclasses import asdict
from pathlib import Path

import msgpack

from .loader import DolBinary


def build_report(binary: DolBinary) -> dict:
    """Collect the derived metadata of a loaded image into plain types."""
    return {
        "info": asdict(binary.info()),
        "baddr": binary.baddr(),
        "entries": [
            {"vaddr": e.virtual_address, "paddr": e.physical_address}
            for e in binary.entries()
        ],
        "sections": [
            {
                "name": s.name,
                "paddr": s.file_offset,
                "vaddr": s.load_address,
                "size": s.size,
                "vsize": s.vsize,
                "perm": s.perm_string,
                "add": s.should_map,
            }
            for s in binary.sections()
        ],
    }


def pack_report(binary: DolBinary) -> bytes:
    """Serialize the metadata report to MessagePack."""
    return msgpack.packb(build_report(binary), use_bin_type=True)


def unpack_report(data: bytes) -> dict:
    """Parse a MessagePack metadata report.

    Raises:
        RuntimeError: If data is not a valid report
    """
    try:
        report = msgpack.unpackb(data, raw=False, strict_map_key=True)
    except (msgpack.exceptions.UnpackException, ValueError) as e:
        raise RuntimeError(f"Failed to parse DOL report: {e}") from e

    if not isinstance(report, dict):
        raise RuntimeError(
            f"Invalid DOL report format: expected dict, got {type(report).__name__}"
        )
    return report


def write_report(binary: DolBinary, path: Path) -> int:
    """Write the MessagePack report to path.

    Returns:
        Number of bytes written
    """
    return Path(path).write_bytes(pack_report(binary))

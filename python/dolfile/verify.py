"""
DOL verification utilities.

DolVerifier runs structural sanity checks over a loaded DOL image. These
checks are stricter than what loading requires - an image can load and still
fail verification. Verification never changes what the loader accepts.

Usage:
    result = DolVerifier.verify(Path("main.dol"))
    if not result.passed:
        print(result)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .loader import DolBinary, DolLoadError
from .types import (
    DOL_HEADER_SIZE,
    DOL_MEM1_END,
    DOL_MEM1_START,
    PERM_X,
    Section,
)

logger = logging.getLogger(__name__)


SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


@dataclass(frozen=True)
class Finding:
    """One problem found in an image, optionally tied to a section."""

    severity: str  # SEVERITY_*
    message: str
    section: str | None = None

    def __str__(self) -> str:
        if self.section is None:
            return self.message
        return f"{self.section}: {self.message}"


@dataclass
class VerificationResult:
    """Findings collected while verifying an image.

    The result passes as long as no error-severity finding was recorded;
    warnings never change the verdict.
    """

    findings: list[Finding] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not any(f.severity == SEVERITY_ERROR for f in self.findings)

    @property
    def errors(self) -> list[str]:
        return [str(f) for f in self.findings if f.severity == SEVERITY_ERROR]

    @property
    def warnings(self) -> list[str]:
        return [str(f) for f in self.findings if f.severity == SEVERITY_WARNING]

    def add_error(self, msg: str, section: str | None = None) -> None:
        self.findings.append(Finding(SEVERITY_ERROR, msg, section))

    def add_warning(self, msg: str, section: str | None = None) -> None:
        self.findings.append(Finding(SEVERITY_WARNING, msg, section))

    def merge(self, other: "VerificationResult") -> None:
        """Append another result's findings after this one's."""
        self.findings.extend(other.findings)

    def for_section(self, name: str) -> list[Finding]:
        """Findings attached to the named section."""
        return [f for f in self.findings if f.section == name]

    def __str__(self) -> str:
        verdict = "PASSED" if self.passed else "FAILED"
        lines = [
            f"Verification {verdict}: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)"
        ]
        lines.extend(f"  [{f.severity}] {f}" for f in self.findings)
        return "\n".join(lines)


class DolVerifier:
    """Structural checks for a loaded DOL image."""

    def __init__(self, binary: DolBinary):
        self._binary = binary

    @classmethod
    def verify(cls, path: Path) -> VerificationResult:
        """Verify a DOL file on disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        return cls.verify_data(Path(path).read_bytes(), str(path))

    @classmethod
    def verify_data(
        cls, data: bytes | bytearray | memoryview, name: str
    ) -> VerificationResult:
        """Verify DOL data in memory.

        A buffer that fails to load is reported as a verification error
        rather than raised.
        """
        try:
            binary = DolBinary.load_buffer(data, name)
        except DolLoadError as e:
            result = VerificationResult()
            result.add_error(f"Failed to load DOL header: {e}")
            return result
        return cls(binary).run_all_checks()

    def run_all_checks(self) -> VerificationResult:
        """Run all structural checks."""
        result = VerificationResult()

        checks: list[Callable[[], VerificationResult]] = [
            self.check_text_present,
            self.check_file_ranges,
            self.check_address_window,
            self.check_no_overlapping_segments,
            self.check_entry_in_text,
        ]

        for check in checks:
            result.merge(check())

        for finding in result.findings:
            logger.debug("%s: %s %s", self._binary.name, finding.severity, finding)
        return result

    def _file_backed(self) -> list[Section]:
        return [s for s in self._binary.sections() if s.name != "bss"]

    # =========================================================================
    # Structural Checks
    # =========================================================================

    def check_text_present(self) -> VerificationResult:
        """Check that at least one text segment is present."""
        result = VerificationResult()
        if not any(s.permissions & PERM_X for s in self._binary.sections()):
            result.add_error("No text segment present")
        return result

    def check_file_ranges(self) -> VerificationResult:
        """Check that text/data content lies after the header and inside the file."""
        result = VerificationResult()
        file_size = self._binary.size

        for section in self._file_backed():
            if section.file_offset < DOL_HEADER_SIZE:
                result.add_error(
                    f"starts inside the header at {section.file_offset:#x}",
                    section=section.name,
                )
            if section.end_offset > file_size:
                result.add_error(
                    f"file range [{section.file_offset:#x}, "
                    f"{section.end_offset:#x}) exceeds file size {file_size:#x}",
                    section=section.name,
                )

        return result

    def check_address_window(self) -> VerificationResult:
        """Check that segments load into main memory."""
        result = VerificationResult()

        for section in self._binary.sections():
            if section.vsize == 0:
                continue
            if not (
                DOL_MEM1_START <= section.load_address
                and section.end_address <= DOL_MEM1_END
            ):
                result.add_warning(
                    f"[{section.load_address:#x}, {section.end_address:#x}) "
                    f"is outside main memory "
                    f"[{DOL_MEM1_START:#x}, {DOL_MEM1_END:#x})",
                    section=section.name,
                )

        return result

    def check_no_overlapping_segments(self) -> VerificationResult:
        """Check that text/data load ranges do not overlap.

        BSS is excluded; real images routinely place small data sections
        inside the BSS range.
        """
        result = VerificationResult()
        by_address = sorted(self._file_backed(), key=lambda s: s.load_address)

        for first, second in zip(by_address, by_address[1:]):
            if first.end_address > second.load_address:
                result.add_warning(
                    f"[{first.load_address:#x}, {first.end_address:#x}) "
                    f"overlaps {second.name} at {second.load_address:#x}",
                    section=first.name,
                )

        return result

    def check_entry_in_text(self) -> VerificationResult:
        """Check that the entry point falls inside a text segment."""
        result = VerificationResult()
        entry = self._binary.entries()[0].virtual_address

        for section in self._binary.sections():
            if section.permissions & PERM_X and section.contains_address(entry):
                return result

        result.add_warning(f"Entry point {entry:#x} is not inside any text segment")
        return result

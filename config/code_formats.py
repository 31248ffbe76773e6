"""
Scanned code formats.

The backend changed the digit count of box and pallet labels several times.
Each revision is kept here so a terminal can be pointed at the table its
backend currently prints.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CodeLengthTable:
    """Digit counts that identify each entity type."""

    version: str
    box_length: int
    pallet_lengths: tuple[int, ...]

    def __post_init__(self):
        if not self.pallet_lengths:
            raise ValueError("At least one pallet length is required")
        if self.box_length in self.pallet_lengths:
            raise ValueError(
                f"Box length {self.box_length} cannot also be a pallet length"
            )

    def describe_pallet_lengths(self) -> str:
        """'12' or '13-14' or '12, 14' for user-facing messages."""
        lengths = sorted(self.pallet_lengths)
        if len(lengths) == 1:
            return str(lengths[0])
        if lengths == list(range(lengths[0], lengths[-1] + 1)):
            return f"{lengths[0]}-{lengths[-1]}"
        return ", ".join(str(n) for n in lengths)


# =============================================================================
# KNOWN REVISIONS
# =============================================================================

# First label printers: 16-digit boxes, 14-digit pallets
V1 = CodeLengthTable(version="v1", box_length=16, pallet_lengths=(14,))

# Pallet codes gained a 13-digit variant while 14-digit labels were still in use
V2 = CodeLengthTable(version="v2", box_length=16, pallet_lengths=(13, 14))

# Current labels: 15-digit boxes, 12-digit pallets
V3 = CodeLengthTable(version="v3", box_length=15, pallet_lengths=(12,))

CODE_LENGTH_TABLES: dict[str, CodeLengthTable] = {
    table.version: table for table in (V1, V2, V3)
}

DEFAULT_CODE_FORMAT_VERSION = "v3"


def get_code_length_table(
    version: str = DEFAULT_CODE_FORMAT_VERSION,
    box_length: Optional[int] = None,
    pallet_lengths: Optional[list[int]] = None
) -> CodeLengthTable:
    """
    Resolve the active code length table.

    Args:
        version: Revision name (v1, v2, v3)
        box_length: Optional override for the box length
        pallet_lengths: Optional override for pallet lengths

    Returns:
        CodeLengthTable

    Raises:
        ValueError: If the version is unknown or the overrides collide
    """
    if version not in CODE_LENGTH_TABLES:
        raise ValueError(
            f"Unknown code format version '{version}'. "
            f"Known: {', '.join(sorted(CODE_LENGTH_TABLES))}"
        )

    base = CODE_LENGTH_TABLES[version]
    if box_length is None and not pallet_lengths:
        return base

    return CodeLengthTable(
        version=f"{version}+override",
        box_length=box_length if box_length is not None else base.box_length,
        pallet_lengths=tuple(pallet_lengths) if pallet_lengths else base.pallet_lengths,
    )

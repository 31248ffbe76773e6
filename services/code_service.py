"""
Scanned code classification.

Turns raw scanner input into a typed ScannedCode (box or pallet) using the
configured code length table. Pure: no I/O, no state.
"""

import re
from typing import Optional

from config import CodeLengthTable, active_code_length_table
from models.results import CanonicalResult, Success, Failure, ok, fail
from models.scan import EntityType, ScannedCode


NON_DIGITS = re.compile(r"[^0-9]")


def sanitize_code(raw: Optional[str]) -> str:
    """Remove every non-digit character: ' 1234-5678 ' → '12345678'."""
    if not raw:
        return ""
    return NON_DIGITS.sub("", raw)


def classify(
    raw: Optional[str],
    table: Optional[CodeLengthTable] = None
) -> CanonicalResult:
    """
    Classify a scanned code by its digit count.

    Box length is checked before pallet lengths; first match wins.

    Args:
        raw: Input as scanned (may contain spaces or separators)
        table: Code length table (defaults to the one in settings)

    Returns:
        Success with a ScannedCode, or Failure EMPTY / UNRECOGNIZED_FORMAT
    """
    table = table or active_code_length_table()

    original = raw if isinstance(raw, str) else ""
    trimmed = original.strip()
    if not trimmed:
        return fail(
            "EMPTY",
            "El código es requerido",
            field="codigo",
        )

    digits = sanitize_code(trimmed)

    if len(digits) == table.box_length:
        entity_type = EntityType.BOX
    elif len(digits) in table.pallet_lengths:
        entity_type = EntityType.PALLET
    else:
        return fail(
            "UNRECOGNIZED_FORMAT",
            (
                f"El código '{trimmed}' no es válido: debe ser un código de caja "
                f"({table.box_length} dígitos) o de pallet "
                f"({table.describe_pallet_lengths()} dígitos)"
            ),
            field="codigo",
            details={
                "raw": original,
                "length": len(digits),
                "box_length": table.box_length,
                "pallet_lengths": list(table.pallet_lengths),
                "version": table.version,
            },
        )

    return ok(ScannedCode(raw=original, normalized=digits, entity_type=entity_type))


def classify_as(
    raw: Optional[str],
    entity_type: EntityType,
    table: Optional[CodeLengthTable] = None
) -> CanonicalResult:
    """
    Classify and require a specific entity type.

    Returns:
        Success with a ScannedCode, or Failure (INVALID_BOX_CODE / INVALID_PALLET_CODE
        when the code is valid but of the other type)
    """
    result = classify(raw, table)
    if isinstance(result, Failure):
        return result

    code: ScannedCode = result.data
    if code.entity_type != entity_type:
        table = table or active_code_length_table()
        expected = (
            f"{table.box_length}"
            if entity_type == EntityType.BOX
            else table.describe_pallet_lengths()
        )
        return fail(
            f"INVALID_{entity_type.value}_CODE",
            f"Se esperaba un código de {_label(entity_type)} ({expected} dígitos)",
            field="codigo",
            details={"raw": code.raw, "classified_as": code.entity_type.value},
        )
    return result


def format_code_for_display(
    raw: Optional[str],
    table: Optional[CodeLengthTable] = None
) -> str:
    """
    Group digits for on-screen reading.

    - 15-digit box: 12345-67890-12345
    - 12-digit pallet: 1234-5678-9012
    - Anything unrecognized: digits only

    Args:
        raw: Code to format
        table: Code length table (defaults to the one in settings)

    Returns:
        Formatted code
    """
    digits = sanitize_code(raw)
    result = classify(digits, table)
    if not isinstance(result, Success):
        return digits

    group = 5 if len(digits) % 5 == 0 and result.data.entity_type == EntityType.BOX else 4
    return "-".join(digits[i:i + group] for i in range(0, len(digits), group))


def _label(entity_type: EntityType) -> str:
    return "caja" if entity_type == EntityType.BOX else "pallet"

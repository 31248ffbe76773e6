"""
Text utilities for handling Spanish backend messages.

Used by the error translator to decide whether a raw message can be shown
to an operator as-is.
"""

import re
import unicodedata
from typing import Optional


SPANISH_DIACRITICS = re.compile(r"[áéíóúñüÁÉÍÓÚÑÜ¿¡]")

# Exception names, "Error:" prefixes, "code:" dumps, "Error 500" and [BRACKETED_CODES]
TECHNICAL_MARKERS = re.compile(
    r"Exception|Error:|code:|^Error\s|Traceback|\[[A-Z0-9_]+\]"
)

TECHNICAL_PREFIXES = (
    re.compile(r"^Error \d+:\s*"),
    re.compile(r"^\[.*?\]\s*"),
)


def has_spanish_diacritics(text: Optional[str]) -> bool:
    """
    Check if text contains Spanish accents or punctuation.

    - "Código no encontrado" → True
    - "Box not found" → False
    """
    if not text:
        return False
    return bool(SPANISH_DIACRITICS.search(text))


def looks_technical(text: Optional[str]) -> bool:
    """
    Check if text reads like a stack trace or a raw backend dump.

    - "ConditionalCheckFailedException: ..." → True
    - "Error: boom" → True
    - "La caja ya está en la venta" → False
    """
    if not text:
        return False
    return bool(TECHNICAL_MARKERS.search(text))


def strip_technical_prefixes(text: Optional[str]) -> str:
    """
    Remove transport noise from a raw message.

    - "Error 500: Internal" → "Internal"
    - "[BOX_SERVICE] Falló" → "Falló"
    - "Error: timeout" → "timeout"

    Args:
        text: Raw message

    Returns:
        Cleaned message (may be empty)
    """
    if not text:
        return ""

    cleaned = text.strip()
    for prefix in TECHNICAL_PREFIXES:
        cleaned = prefix.sub("", cleaned)
    cleaned = cleaned.replace("Error:", "")

    # Normalize whitespace
    return re.sub(r"\s+", " ", cleaned).strip()


def strip_accents(text: Optional[str]) -> str:
    """
    Remove accents for comparison: "Código" → "Codigo".

    NFD decomposition separates base chars from accents (category 'Mn').
    """
    if not text:
        return ""
    normalized = unicodedata.normalize('NFD', text)
    return ''.join(c for c in normalized if unicodedata.category(c) != 'Mn')

"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    get_code_length_table: Resolve a scanned-code length table by revision
    active_code_length_table: Table selected by the current settings
"""

from typing import Optional

from config.settings import settings, get_settings, Settings
from config.code_formats import (
    CodeLengthTable,
    CODE_LENGTH_TABLES,
    get_code_length_table,
)


def active_code_length_table(current: Optional[Settings] = None) -> CodeLengthTable:
    """Code length table selected by the given (or global) settings."""
    current = current or settings
    return get_code_length_table(
        current.code_format_version,
        box_length=current.box_code_length,
        pallet_lengths=current.pallet_code_lengths,
    )


__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Code formats
    "CodeLengthTable",
    "CODE_LENGTH_TABLES",
    "get_code_length_table",
    "active_code_length_table",
]

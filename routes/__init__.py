"""
API route modules.

Each module defines routes for one area of the terminal.
"""

from routes.scan import router as scan_router
from routes.codes import router as codes_router
from routes.sales import router as sales_router
from routes.pallets import router as pallets_router

__all__ = [
    "scan_router",
    "codes_router",
    "sales_router",
    "pallets_router",
]

"""Row-by-row spreadsheet processing with per-row error isolation."""

from .excel.grid import Grid, GridSource, StaticSource
from .excel.reader import WorkbookSource
from .models.point import Point
from .services.error_handlers import drop_row, raise_fatal, substitute
from .services.locator import CellNotFoundError, locate_cell
from .services.template import RowHandlerError, RowTemplate

__all__ = [
    "CellNotFoundError",
    "Grid",
    "GridSource",
    "Point",
    "RowHandlerError",
    "RowTemplate",
    "StaticSource",
    "WorkbookSource",
    "drop_row",
    "locate_cell",
    "raise_fatal",
    "substitute",
]

__version__ = "0.1.0"

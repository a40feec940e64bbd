from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Row progress display with tqdm (TTY only).

A single bar per pass, one tick per visited row. In non-TTY environments (CI,
pipes) the bar is not created at all so no control sequences leak into output.
"""

__all__ = [
    "RowProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class RowProgressTracker:
    """Progress tracker for the rows of one sheet."""

    def __init__(self, total_rows: int, *, description: str = "Processing rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.current_row = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self) -> None:
        self.current_row += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

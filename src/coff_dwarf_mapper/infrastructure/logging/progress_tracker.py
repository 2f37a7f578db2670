#!/usr/bin/env python3

"""Progress tracking for the debug-info walk."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from time import time
from typing import Any


class ProgressTracker:
    """
    Track and report debug-info walk progress.

    Counts compilation units and entries visited, and times the named
    pipeline operations wrapped in track_operation().
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.start_time = time()
        self.unit_count = 0
        self.entry_count = 0
        self.operation_stack: list[tuple[str, float]] = []

    @contextmanager
    def track_operation(self, operation_name: str) -> Iterator[None]:
        """
        Track a high-level operation with timing.

        Args:
            operation_name: Name of the operation being tracked
        """
        start_time = time()
        self.operation_stack.append((operation_name, start_time))
        self.logger.debug(f"Starting operation: {operation_name}")

        try:
            yield
            elapsed = time() - start_time
            self.logger.debug(f"Completed operation: {operation_name} in {elapsed:.3f}s")
        except Exception as e:
            elapsed = time() - start_time
            self.logger.error(
                f"Failed operation: {self.get_current_context()} after {elapsed:.3f}s: {e}"
            )
            raise
        finally:
            self.operation_stack.pop()

    @contextmanager
    def track_unit(self, unit: Any) -> Iterator[None]:
        """
        Track compilation unit processing.

        Args:
            unit: Compilation unit being walked (anything with offset/length)
        """
        self.unit_count += 1
        unit_start = time()

        unit_offset = getattr(unit, "offset", 0)
        unit_length = getattr(unit, "length", 0)
        self.logger.debug(
            f"Processing unit #{self.unit_count} at 0x{unit_offset:x} (length: {unit_length} bytes)"
        )

        initial_entry_count = self.entry_count
        try:
            yield
        except Exception as e:
            elapsed = time() - unit_start
            self.logger.error(f"Unit #{self.unit_count} failed after {elapsed:.3f}s: {e}")
            raise

        elapsed = time() - unit_start
        entries = self.entry_count - initial_entry_count
        self.logger.debug(
            f"Unit #{self.unit_count} completed in {elapsed:.3f}s ({entries} entries visited)"
        )

    def count_entry(self) -> None:
        """Increment the visited-entry counter."""
        self.entry_count += 1

    def report_summary(self) -> None:
        """Report final walk statistics."""
        total_time = time() - self.start_time
        rate = self.entry_count / total_time if total_time > 0 else 0

        self.logger.info(
            f"Walk complete: {self.unit_count} units, {self.entry_count} entries "
            f"in {total_time:.2f}s ({rate:.1f} entries/s)"
        )

    def get_current_context(self) -> str:
        """Describe the current operation stack for log messages."""
        if not self.operation_stack:
            return "idle"
        return " -> ".join(op[0] for op in self.operation_stack)

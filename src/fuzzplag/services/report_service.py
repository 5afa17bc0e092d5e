"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/report_service.py
Writes ordered candidate pairs as CSV (Source, Dest, Distance) or as a plain-text table.
"""
import csv
import logging
from typing import Iterable, List, TextIO

from fuzzplag.core.errors import ReportError
from fuzzplag.core.models import CandidatePair

logger = logging.getLogger(__name__)

HEADER = ["Source", "Dest", "Distance"]


class ReportService:
    """
    Report writer for the final pair list.
    Pairs are written in the order given; sorting is done upstream.
    """

    @staticmethod
    def write(pairs: Iterable[CandidatePair], path: str, fmt: str = "csv") -> int:
        """
        Writes the report to `path`, truncating any existing file.

        Returns:
            Number of pair rows written

        Raises:
            ReportError: If the file cannot be opened or written. Whatever was
                written before the failure is flushed when the file is closed.
        """
        try:
            handle = open(path, 'w', newline='', encoding='utf-8')
        except OSError as e:
            raise ReportError(f"Error opening file {path}: {e}") from e

        try:
            with handle:
                if fmt == "text":
                    count = ReportService.write_text(pairs, handle)
                else:
                    count = ReportService.write_csv(pairs, handle)
        except OSError as e:
            raise ReportError(f"Error writing to file {path}: {e}") from e

        logger.info(f"Wrote {count} pairs to {path}")
        return count

    @staticmethod
    def write_csv(pairs: Iterable[CandidatePair], stream: TextIO) -> int:
        writer = csv.writer(stream)
        writer.writerow(HEADER)
        count = 0
        for pair in pairs:
            writer.writerow(pair.as_row())
            count += 1
        return count

    @staticmethod
    def write_text(pairs: Iterable[CandidatePair], stream: TextIO) -> int:
        """Aligned columns; widths come from the longest source and dest paths."""
        rows: List[List[str]] = [pair.as_row() for pair in pairs]
        source_width = max([len(HEADER[0])] + [len(r[0]) for r in rows])
        dest_width = max([len(HEADER[1])] + [len(r[1]) for r in rows])

        def line(cells: List[str]) -> str:
            return f"{cells[0]:<{source_width}}  {cells[1]:<{dest_width}}  {cells[2]:>8}\n"

        stream.write(line(HEADER))
        stream.write("-" * (source_width + dest_width + 12) + "\n")
        for row in rows:
            stream.write(line(row))
        return len(rows)

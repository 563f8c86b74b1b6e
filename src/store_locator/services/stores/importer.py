"""Bulk loading of store datasets into the store index."""

from __future__ import annotations

import csv
import logging
import math
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, TextIO

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ...config import settings
from ...errors import EmptyOrMalformedSource, StorageUnavailable
from ...models.domain import Address, GeoPoint, StoreRecord
from .index import StoreIndex

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Name", "Street Address", "City", "Zip", "Latitude", "Longitude")


@dataclass(frozen=True, slots=True)
class ImportReport:
    imported: int
    skipped: int
    performed: bool = True


def _coerce_coordinate(value: object, lower: float, upper: float) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number) or not lower <= number <= upper:
        return None
    return number


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()


def parse_store_rows(rows: Iterable[Sequence[object]]) -> tuple[list[StoreRecord], int]:
    """Turn header + data rows into store records.

    Returns the parsed records and the number of rows skipped because their
    column count disagrees with the header or their coordinates are unusable.
    """

    iterator = iter(rows)
    header = next(iterator, None)
    if not header:
        raise EmptyOrMalformedSource("Store source is empty or missing a header row.")

    header_map = {_text(name): idx for idx, name in enumerate(header)}
    missing_columns = [column for column in REQUIRED_COLUMNS if column not in header_map]
    if missing_columns:
        raise EmptyOrMalformedSource(f"Store source missing columns: {', '.join(missing_columns)}")

    records: list[StoreRecord] = []
    skipped = 0
    for line_number, row in enumerate(iterator, start=2):
        if not any(_text(cell) for cell in row):
            continue
        if len(row) != len(header):
            logger.warning(f"Skipping row {line_number}: expected {len(header)} columns, got {len(row)}")
            skipped += 1
            continue
        latitude = _coerce_coordinate(row[header_map["Latitude"]], -90.0, 90.0)
        longitude = _coerce_coordinate(row[header_map["Longitude"]], -180.0, 180.0)
        if latitude is None or longitude is None:
            logger.warning(f"Skipping row {line_number}: invalid coordinates")
            skipped += 1
            continue
        records.append(
            StoreRecord(
                name=_text(row[header_map["Name"]]),
                address=Address(
                    street=_text(row[header_map["Street Address"]]),
                    city=_text(row[header_map["City"]]),
                    postal_code=_text(row[header_map["Zip"]]),
                    location=GeoPoint(longitude=longitude, latitude=latitude),
                ),
            )
        )

    if not records:
        raise EmptyOrMalformedSource(f"No store rows could be parsed ({skipped} skipped).")
    return records, skipped


def import_if_empty(index: StoreIndex, source: TextIO, delimiter: str | None = None) -> ImportReport:
    """Load a delimited store dataset unless the index already holds stores."""

    if index.count() != 0:
        logger.info(f"Store index already holds {index.count()} stores; skipping import")
        return ImportReport(imported=0, skipped=0, performed=False)

    reader = csv.reader(source, delimiter=delimiter or settings.import_delimiter)
    return _load(index, reader)


def _iter_workbook_rows(path: Path) -> Iterator[tuple]:
    workbook = load_workbook(filename=path, read_only=True, data_only=True)
    try:
        worksheet = workbook.active
        # rows come back padded to the sheet width, so column counts always agree
        yield from worksheet.iter_rows(values_only=True)
    finally:
        workbook.close()


def import_file_if_empty(index: StoreIndex, path: Path) -> ImportReport:
    """Import a ``.csv`` or ``.xlsx`` store dataset from disk."""

    if index.count() != 0:
        logger.info(f"Store index already holds {index.count()} stores; skipping import of {path.name}")
        return ImportReport(imported=0, skipped=0, performed=False)
    if not path.exists():
        raise EmptyOrMalformedSource(f"Store file not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in (".csv", ".xlsx"):
        raise EmptyOrMalformedSource(f"Unsupported store file type '{suffix}'. Only .csv and .xlsx are supported.")

    try:
        if suffix == ".csv":
            with path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
                return import_if_empty(index, handle)
        return _load(index, _iter_workbook_rows(path))
    except (UnicodeDecodeError, csv.Error, zipfile.BadZipFile, InvalidFileException, OSError) as exc:
        raise EmptyOrMalformedSource(f"Store file {path.name} could not be read: {exc}") from exc


def _load(index: StoreIndex, rows: Iterable[Sequence[object]]) -> ImportReport:
    records, skipped = parse_store_rows(rows)
    logger.info(f"Importing {len(records)} stores ({skipped} rows skipped)")
    imported = index.bulk_insert(records)
    logger.info(f"Successfully imported {imported} stores.")
    return ImportReport(imported=imported, skipped=skipped)


def bootstrap_store_index(index: StoreIndex, store_file: Path | None = None) -> ImportReport | None:
    """Startup hook: restore stores from the backend, then import the dataset if still empty.

    Import failures are logged and swallowed so the service can still serve
    whatever is already indexed.
    """

    try:
        index.load_from_backend()
    except StorageUnavailable as exc:
        logger.error(f"Could not load stores from backend: {exc.message}")

    if not settings.import_on_startup:
        return None

    try:
        return import_file_if_empty(index, store_file or settings.store_file)
    except (EmptyOrMalformedSource, StorageUnavailable) as exc:
        logger.error(f"Store import aborted ({exc.kind}): {exc.message}")
        return None

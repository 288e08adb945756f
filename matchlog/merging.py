"""Reconciliation of spreadsheet and database match records."""

import dataclasses
import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from matchlog import BOTH, MatchRecord, MergeFilter
from matchlog.adapters import record_from_db_row, records_from_sheet_rows
from matchlog.opponents import DEFAULT_THRESHOLD, find_best_match
from matchlog.sources import MatchStore, SheetSource

log = logging.getLogger(__name__)

DEFAULT_SHEET_RANGE = 'Match Log!A1:ZZ1000'


def _merge_pair(db_record: MatchRecord, sheet_record: MatchRecord) -> MatchRecord:
    """Merge a paired record; database fields win on key collisions."""
    stats = dict(sheet_record.stats_fields)
    stats.update(db_record.stats_fields)
    return dataclasses.replace(
        db_record,
        stats_fields=stats,
        source_origin=BOTH,
    )


def merge_records(
    db_records: list[MatchRecord],
    sheet_records: list[MatchRecord],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[MatchRecord]:
    """Merge database and spreadsheet records into one sorted list.

    Each database record is paired with at most one unconsumed spreadsheet
    record of the same date whose opponent name is similar enough. Paired
    records are merged, everything else is kept as-is. Database records
    are never deduplicated against each other.

    Args:
        db_records: Records from the relational store.
        sheet_records: Records from the spreadsheet.
        threshold: Minimum opponent similarity for pairing (0–1).

    Returns:
        Merged records sorted by date, newest first. Records sharing a
        date keep their input order.
    """
    by_date: dict[str, list[int]] = defaultdict(list)
    for index, record in enumerate(sheet_records):
        if record.date:
            by_date[record.date].append(index)

    consumed: set[int] = set()
    merged: list[MatchRecord] = []

    for db_record in db_records:
        candidates = [i for i in by_date.get(db_record.date, []) if i not in consumed]
        names = [sheet_records[i].opponent_name for i in candidates]
        best = find_best_match(db_record.opponent_name, names, threshold)
        if best is None:
            merged.append(db_record)
            continue

        # First candidate carrying the best name, matching the tie rule
        index = candidates[names.index(best.name)]
        consumed.add(index)
        log.debug(
            "Gepaart: %s %s <-> %s (%.2f)",
            db_record.date, db_record.opponent_name, best.name, best.similarity,
        )
        merged.append(_merge_pair(db_record, sheet_records[index]))

    merged.extend(r for i, r in enumerate(sheet_records) if i not in consumed)

    # sort() is stable, also with reverse=True
    merged.sort(key=lambda r: r.date, reverse=True)

    log.info(
        "Zusammengefuehrt: %d aus Sheet, %d aus DB, %d gesamt (%d gepaart)",
        len(sheet_records), len(db_records), len(merged), len(consumed),
    )
    return merged


def _fetch_sheet_records(
    sheet_source: Optional[SheetSource],
    sheet_range: str,
) -> list[MatchRecord]:
    if sheet_source is None:
        return []
    return records_from_sheet_rows(sheet_source.fetch_rows(sheet_range))


def fetch_and_merge(
    match_store: MatchStore,
    sheet_source: Optional[SheetSource],
    match_filter: Optional[MergeFilter] = None,
    sheet_range: str = DEFAULT_SHEET_RANGE,
    threshold: float = DEFAULT_THRESHOLD,
) -> list[MatchRecord]:
    """Fetch both sources concurrently and merge them.

    A failing spreadsheet fetch is logged and treated as empty. A failing
    database fetch propagates to the caller.

    Args:
        match_store: Relational match store.
        sheet_source: Spreadsheet feed, None for database-only output.
        match_filter: Team and date restrictions.
        sheet_range: Range selector passed to the spreadsheet feed.
        threshold: Minimum opponent similarity for pairing (0–1).

    Returns:
        Merged records, see merge_records().
    """
    match_filter = match_filter or MergeFilter()

    with ThreadPoolExecutor(max_workers=2) as pool:
        sheet_future = pool.submit(_fetch_sheet_records, sheet_source, sheet_range)
        db_future = pool.submit(match_store.fetch_matches, match_filter)

        try:
            sheet_records = sheet_future.result()
        except Exception as exc:
            log.warning("Sheet-Daten konnten nicht geladen werden: %s", exc)
            sheet_records = []

        db_rows = db_future.result()

    db_records = [record_from_db_row(row) for row in db_rows]

    if match_filter.has_date_range():
        sheet_records = [r for r in sheet_records if match_filter.covers_date(r.date)]

    return merge_records(db_records, sheet_records, threshold)

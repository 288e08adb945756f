"""Conversion of raw source rows into MatchRecord objects.

All guessing of column names happens here; the matching and merging
code only sees the canonical MatchRecord shape.
"""

import json
import logging
import re
from datetime import date, datetime
from typing import Any, Mapping, Optional

from matchlog import DATABASE, SHEET, MatchRecord

log = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})')
_US_DATE_RE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})')

# Header aliases for spreadsheet rows (compared lowercase)
DATE_HEADERS = ('date', 'match date')
OPPONENT_HEADERS = ('opponent', 'opponent name')
MATCH_ID_HEADERS = ('match id', 'matchid', 'match_id')

# Relational columns that are not statistics
DB_META_COLUMNS = {
    'id', 'team_id', 'opponent_name', 'match_date', 'stats_json',
    'competition_type', 'result', 'is_home', 'venue', 'referee', 'notes',
    'stats_source', 'stats_computed_at', 'stats_manual_fields',
    'created_by', 'created_at', 'updated_at', 'last_modified_by',
}


def normalize_date(value: Any) -> str:
    """Normalize a date value to YYYY-MM-DD.

    Only the calendar part is kept; time and zone information is dropped
    without converting between zones.

    Args:
        value: date/datetime object, ISO string, M/D/YYYY string or None.

    Returns:
        Normalized date string, '' for empty input. Unrecognized strings
        are returned stripped.
    """
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    m = _ISO_DATE_RE.match(text)
    if m:
        year, month, day = m.groups()
        return f'{year}-{int(month):02d}-{int(day):02d}'
    m = _US_DATE_RE.match(text)
    if m:
        month, day, year = m.groups()
        return f'{year}-{int(month):02d}-{int(day):02d}'
    return text


def display_key(key: str) -> str:
    """Convert a stats key to the spreadsheet header style.

    "goalsFor" -> "Goals For", "shots_on_target" -> "Shots On Target".
    Other keys are returned unchanged.
    """
    if 'For' in key or 'Against' in key:
        spaced = re.sub(r'(?<=[a-z])([A-Z])', r' \1', key)
        return spaced[:1].upper() + spaced[1:]
    if '_' in key:
        return ' '.join(word[:1].upper() + word[1:] for word in key.split('_') if word)
    return key


def _is_match_id_key(key: str) -> bool:
    return key.lower().replace(' ', '').replace('_', '') == 'matchid'


def parse_stats_blob(raw: Any, match_ref: Any = None) -> dict:
    """Decode a JSON stats blob.

    Args:
        raw: JSON text, an already decoded dict or None.
        match_ref: Identifier used in the log message.

    Returns:
        Decoded dict, empty if the blob is missing or malformed.
    """
    if raw is None or raw == '':
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        log.warning("Ungueltige Statistik-Daten fuer Spiel %s ignoriert: %s", match_ref, exc)
        return {}
    if not isinstance(decoded, dict):
        log.warning("Statistik-Daten fuer Spiel %s sind kein Objekt, ignoriert", match_ref)
        return {}
    return decoded


def _home_away(is_home: Any) -> str:
    if is_home is None or is_home == '':
        return ''
    return 'Home' if bool(is_home) else 'Away'


def record_from_db_row(row: Mapping[str, Any]) -> MatchRecord:
    """Build a MatchRecord from a relational matches row.

    The primary key is the match ID unless the stats blob carries a
    "Match ID" entry, which then takes its place.

    Args:
        row: Row with snake_case column names.

    Returns:
        MatchRecord with source_origin DATABASE.
    """
    match_id = row.get('id')
    stats: dict = {
        'Competition Type': row.get('competition_type') or '',
        'Result': row.get('result') or '',
        'Home/Away': _home_away(row.get('is_home')),
        'Venue': row.get('venue') or '',
        'Referee': row.get('referee') or '',
        'Notes': row.get('notes') or '',
    }

    blob = parse_stats_blob(row.get('stats_json'), match_id)
    for key, value in blob.items():
        if _is_match_id_key(key):
            if isinstance(value, str):
                value = value.strip()
            if value not in (None, ''):
                match_id = value
            continue
        stats[key] = value
        normalized = display_key(key)
        if normalized != key:
            stats[normalized] = value

    # First-class computed columns win over the blob
    for column, value in row.items():
        if column in DB_META_COLUMNS or value is None:
            continue
        stats[display_key(column)] = value

    team_id = row.get('team_id')
    return MatchRecord(
        date=normalize_date(row.get('match_date')),
        opponent_name=(row.get('opponent_name') or '').strip(),
        match_id=match_id,
        stats_fields=stats,
        source_origin=DATABASE,
        team_id=team_id,
    )


def _lookup(row: Mapping[str, Any], aliases: tuple) -> tuple[Optional[str], Any]:
    """Find the first non-empty column matching one of the aliases."""
    for key, value in row.items():
        if key.strip().lower() in aliases and value not in (None, ''):
            return key, value
    return None, None


def _coerce_match_id(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return value.strip() or None
    return value


def record_from_sheet_row(row: Mapping[str, Any]) -> Optional[MatchRecord]:
    """Build a MatchRecord from a spreadsheet row.

    Args:
        row: Row as returned by rows_from_values().

    Returns:
        MatchRecord with source_origin SHEET, None if the row carries
        neither date, opponent nor match ID.
    """
    date_key, date_value = _lookup(row, DATE_HEADERS)
    opponent_key, opponent = _lookup(row, OPPONENT_HEADERS)
    id_key, match_id = _lookup(row, MATCH_ID_HEADERS)

    if date_key is None and opponent_key is None and id_key is None:
        return None

    used = {date_key, opponent_key, id_key}
    # Other alias columns (e.g. an empty "date" next to "Date") are dropped too
    aliases = DATE_HEADERS + OPPONENT_HEADERS + MATCH_ID_HEADERS
    stats = {
        key: value for key, value in row.items()
        if key not in used and key.strip().lower() not in aliases
    }

    return MatchRecord(
        date=normalize_date(date_value),
        opponent_name=str(opponent).strip() if opponent is not None else '',
        match_id=_coerce_match_id(match_id),
        stats_fields=stats,
        source_origin=SHEET,
    )


def records_from_sheet_rows(rows: list[Mapping[str, Any]]) -> list[MatchRecord]:
    """Convert spreadsheet rows, skipping rows that cannot be identified."""
    records: list[MatchRecord] = []
    for record_num, row in enumerate(rows, start=1):
        record = record_from_sheet_row(row)
        if record is None:
            log.warning("Datensatz %d uebersprungen: weder Datum, Gegner noch Match ID", record_num)
            continue
        records.append(record)
    return records

"""Match data sources: relational match store and spreadsheet feeds."""

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import quote

import requests

from matchlog import MergeFilter, SourceUnavailableError
from matchlog.reader import read_sheet_csv, rows_from_values

log = logging.getLogger(__name__)

SHEETS_API_URL = 'https://sheets.googleapis.com/v4/spreadsheets/{spreadsheet_id}/values/{range}'

MATCHES_SCHEMA = """
    CREATE TABLE IF NOT EXISTS matches (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        team_id INTEGER,
        opponent_name TEXT NOT NULL,
        match_date TEXT NOT NULL,
        competition_type TEXT,
        result TEXT,
        is_home INTEGER,
        venue TEXT,
        referee TEXT,
        notes TEXT,
        stats_json TEXT,
        goals_for INTEGER,
        goals_against INTEGER,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
"""


class MatchStore(Protocol):
    """Relational store of record for matches."""

    def fetch_matches(self, match_filter: MergeFilter) -> list[dict]: ...


class SheetSource(Protocol):
    """Spreadsheet-like tabular feed of match rows."""

    def fetch_rows(self, range_selector: str) -> list[dict]: ...


def sheet_name_from_range(range_selector: str) -> str:
    """Extract the sheet name from an A1 range ("Match Log!A1:ZZ1000")."""
    name = range_selector.split('!', 1)[0] if '!' in range_selector else range_selector
    return name.strip().strip("'")


def init_schema(db_path: str | Path) -> None:
    """Create the matches table if it does not exist."""
    conn = sqlite3.connect(str(db_path))
    try:
        with conn:
            conn.execute(MATCHES_SCHEMA)
    finally:
        conn.close()


class SqliteMatchStore:
    """Match store backed by a SQLite database file."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    def fetch_matches(self, match_filter: Optional[MergeFilter] = None) -> list[dict]:
        """Fetch raw match rows, newest first.

        Args:
            match_filter: Team and date restrictions.

        Returns:
            One dict per row, keyed by column name.

        Raises:
            SourceUnavailableError: If the database file does not exist.
            sqlite3.Error: On query failures.
        """
        if not self.db_path.is_file():
            raise SourceUnavailableError(f"Datenbank nicht gefunden: {self.db_path}")

        match_filter = match_filter or MergeFilter()
        clauses: list[str] = []
        params: list = []

        team_ids = match_filter.all_team_ids()
        if team_ids:
            clauses.append(f"team_id IN ({', '.join('?' for _ in team_ids)})")
            params.extend(team_ids)
        if match_filter.start_date:
            clauses.append('match_date >= ?')
            params.append(match_filter.start_date)
        if match_filter.end_date:
            # Stored values may carry a time part; compare on the date prefix
            clauses.append('substr(match_date, 1, 10) <= ?')
            params.append(match_filter.end_date)

        sql = 'SELECT * FROM matches'
        if clauses:
            sql += ' WHERE ' + ' AND '.join(clauses)
        sql += ' ORDER BY match_date DESC, id DESC'

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.row_factory = sqlite3.Row
            rows = [dict(row) for row in conn.execute(sql, params)]
        finally:
            conn.close()

        log.info("%d Spiele aus %s gelesen", len(rows), self.db_path)
        return rows


class SheetsApiSource:
    """Spreadsheet rows fetched from the Google Sheets values API."""

    def __init__(
        self,
        spreadsheet_id: Optional[str],
        api_key: Optional[str],
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_rows(self, range_selector: str) -> list[dict]:
        """Fetch and parse the rows of a sheet range.

        Raises:
            SourceUnavailableError: On missing credentials, network or API errors.
        """
        if not self.spreadsheet_id:
            raise SourceUnavailableError('GOOGLE_SHEETS_SPREADSHEET_ID ist nicht gesetzt.')
        if not self.api_key:
            raise SourceUnavailableError('GOOGLE_SHEETS_API_KEY ist nicht gesetzt.')

        url = SHEETS_API_URL.format(
            spreadsheet_id=self.spreadsheet_id,
            range=quote(range_selector, safe=''),
        )
        try:
            response = self.session.get(url, params={'key': self.api_key}, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise SourceUnavailableError(f"Google Sheets nicht erreichbar: {exc}") from exc

        if not response.ok:
            raise SourceUnavailableError(_describe_api_error(response, range_selector))

        values = response.json().get('values') or []
        rows = rows_from_values(values)
        log.info("%d Zeilen aus Google Sheets gelesen (%s)", len(rows), range_selector)
        return rows


def _describe_api_error(response: requests.Response, range_selector: str) -> str:
    """Build an explanatory message for a failed Sheets API call."""
    try:
        error = response.json().get('error') or {}
    except ValueError:
        error = {}
    message = error.get('message') or response.reason or 'unbekannter Fehler'

    if response.status_code == 403:
        return (f"Google Sheets Zugriff verweigert: {message}. API-Key, Freigabe "
                f"des Sheets und Kontingent pruefen.")
    if response.status_code == 404:
        return (f"Spreadsheet nicht gefunden: {message}. Spreadsheet-ID und "
                f"Sheet-Name in '{range_selector}' pruefen.")
    if response.status_code == 400:
        return f"Ungueltige Anfrage: {message}. Bereich '{range_selector}' pruefen."
    return f"Google Sheets API Fehler ({response.status_code}): {message}"


class CsvSheetSource:
    """Spreadsheet rows read from CSV exports.

    path is either a single CSV file or a directory holding one
    "<sheet name>.csv" per sheet.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def fetch_rows(self, range_selector: str) -> list[dict]:
        csv_path = self.path
        if self.path.is_dir():
            csv_path = self.path / f"{sheet_name_from_range(range_selector)}.csv"
        try:
            return read_sheet_csv(csv_path)
        except (OSError, ValueError) as exc:
            raise SourceUnavailableError(f"Sheet-Export nicht lesbar: {exc}") from exc

"""matchlog – CLI-Tool zum Zusammenfuehren von Spieldaten aus Sheet und Datenbank."""

import argparse
import logging
import os
from pathlib import Path

from matchlog import MergeFilter
from matchlog.merging import DEFAULT_SHEET_RANGE, fetch_and_merge
from matchlog.opponents import DEFAULT_THRESHOLD
from matchlog.reporter import write_csv_report, write_html_report, print_summary
from matchlog.sources import CsvSheetSource, SheetsApiSource, SqliteMatchStore


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Spieldaten aus Google Sheets und der Datenbank zusammenfuehren.',
        prog='merger.py',
    )
    parser.add_argument(
        '--db', required=True, type=Path,
        help='Pfad zur SQLite-Datenbank mit der Tabelle "matches"',
    )
    parser.add_argument(
        '--sheet-csv', type=Path,
        help='CSV-Export des Sheets (Datei oder Verzeichnis mit <Sheet-Name>.csv)',
    )
    parser.add_argument(
        '--sheets-api', action='store_true',
        help='Sheet-Daten ueber die Google Sheets API laden',
    )
    parser.add_argument(
        '--spreadsheet-id', default=os.environ.get('GOOGLE_SHEETS_SPREADSHEET_ID'),
        help='Spreadsheet-ID (Standard: $GOOGLE_SHEETS_SPREADSHEET_ID)',
    )
    parser.add_argument(
        '--api-key', default=os.environ.get('GOOGLE_SHEETS_API_KEY'),
        help='API-Key (Standard: $GOOGLE_SHEETS_API_KEY)',
    )
    parser.add_argument(
        '--range', default=DEFAULT_SHEET_RANGE,
        help=f'Sheet-Bereich (Standard: "{DEFAULT_SHEET_RANGE}")',
    )
    parser.add_argument(
        '--team-id', type=int, action='append', default=[],
        help='Nur Spiele dieses Teams (mehrfach angebbar)',
    )
    parser.add_argument(
        '--start-date',
        help='Fruehestes Spieldatum (YYYY-MM-DD)',
    )
    parser.add_argument(
        '--end-date',
        help='Spaetestes Spieldatum (YYYY-MM-DD)',
    )
    parser.add_argument(
        '--threshold', type=float, default=DEFAULT_THRESHOLD,
        help=f'Schwellenwert fuer den Gegner-Abgleich (Standard: {DEFAULT_THRESHOLD})',
    )
    parser.add_argument(
        '--output', type=Path,
        help='Pfad fuer die Report-Ausgabe (CSV)',
    )
    parser.add_argument(
        '--html', action='store_true',
        help='Zusaetzlich einen HTML-Report erzeugen',
    )
    parser.add_argument(
        '--summary', action='store_true',
        help='Zusammenfassung auf stdout ausgeben',
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.sheet_csv and args.sheets_api:
        parser.error('--sheet-csv und --sheets-api schliessen sich gegenseitig aus.')

    if not args.output and not args.summary:
        parser.error('Entweder --output oder --summary muss angegeben werden.')

    if args.html and not args.output:
        parser.error('--output ist erforderlich bei Verwendung von --html.')

    if not 0.0 <= args.threshold <= 1.0:
        parser.error('--threshold muss zwischen 0 und 1 liegen.')

    sheet_source = None
    if args.sheet_csv:
        sheet_source = CsvSheetSource(args.sheet_csv)
    elif args.sheets_api:
        sheet_source = SheetsApiSource(args.spreadsheet_id, args.api_key)

    match_filter = MergeFilter(
        team_ids=tuple(args.team_id),
        start_date=args.start_date,
        end_date=args.end_date,
    )

    records = fetch_and_merge(
        SqliteMatchStore(args.db), sheet_source, match_filter,
        args.range, args.threshold,
    )

    if args.output:
        write_csv_report(records, args.output)
        if args.html:
            write_html_report(records, args.output.with_suffix('.html'), args.db.stem)

    if args.summary:
        print_summary(records, args.db.stem)


if __name__ == '__main__':
    main()

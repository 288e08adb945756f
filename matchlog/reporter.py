"""Report generation for merged match data (CSV, HTML, summary)."""

import csv
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from matchlog import BOTH, DATABASE, SHEET, MatchRecord

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / 'templates'

BASE_COLUMNS = ['Match ID', 'Date', 'Opponent', 'Team ID', 'Source']


def report_columns(records: list[MatchRecord]) -> list[str]:
    """Base columns followed by all stats keys in first-seen order."""
    columns = list(BASE_COLUMNS)
    seen = set(columns)
    for record in records:
        for key in record.stats_fields:
            if key not in seen:
                seen.add(key)
                columns.append(key)
    return columns


def _format(value) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _record_to_row(record: MatchRecord) -> dict:
    """Convert a MatchRecord to a flat dict of strings for CSV/HTML output."""
    row = {key: _format(value) for key, value in record.to_row().items()}
    row.setdefault('Team ID', '')
    row['Source'] = record.source_origin
    return row


def write_csv_report(records: list[MatchRecord], output_path: Path) -> None:
    """Write merged records as a CSV report.

    Uses UTF-8 with BOM (utf-8-sig) and semicolon delimiter for
    compatibility with German Excel.

    Args:
        records: Merged match records.
        output_path: Path for the output CSV file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(
            f, fieldnames=report_columns(records), delimiter=';', restval='',
        )
        writer.writeheader()
        for record in records:
            writer.writerow(_record_to_row(record))

    log.info("CSV-Report geschrieben: %s (%d Zeilen)", output_path, len(records))


def write_html_report(
    records: list[MatchRecord],
    output_path: Path,
    title: str = '',
) -> None:
    """Write merged records as an HTML report using Jinja2.

    Args:
        records: Merged match records.
        output_path: Path for the output HTML file.
        title: Report title.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template('report.html')

    html = template.render(
        title=title,
        rows=[_record_to_row(r) for r in records],
        stats=compute_stats(records),
        columns=report_columns(records),
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML-Report geschrieben: %s", output_path)


def compute_stats(records: list[MatchRecord]) -> dict:
    """Compute summary counts from merged records."""
    return {
        'total': len(records),
        'both': sum(1 for r in records if r.source_origin == BOTH),
        'database': sum(1 for r in records if r.source_origin == DATABASE),
        'sheet': sum(1 for r in records if r.source_origin == SHEET),
        'without_id': sum(1 for r in records if r.match_id is None),
    }


def print_summary(records: list[MatchRecord], title: str = '') -> None:
    """Print a summary of merged records to stdout."""
    stats = compute_stats(records)

    print(f"\n=== Spieluebersicht: {title} ===")
    print(f"Spiele gesamt:             {stats['total']:>5}")
    print(f"Sheet + Datenbank:         {stats['both']:>5}")
    print(f"Nur Datenbank:             {stats['database']:>5}")
    print(f"Nur Sheet:                 {stats['sheet']:>5}")
    print(f"Ohne Match ID:             {stats['without_id']:>5}")
    print()

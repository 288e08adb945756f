"""Tests for the merger.py command line interface."""

import csv
import re

import pytest

from merger import build_parser, main


class TestArguments:
    """Tests for argument parsing and validation."""

    def test_defaults(self):
        args = build_parser().parse_args(['--db', 'matches.db'])
        assert args.range == 'Match Log!A1:ZZ1000'
        assert args.threshold == 0.7
        assert args.team_id == []

    def test_repeated_team_ids(self):
        args = build_parser().parse_args(['--db', 'x.db', '--team-id', '1', '--team-id', '4'])
        assert args.team_id == [1, 4]

    def test_output_or_summary_required(self, db_path):
        with pytest.raises(SystemExit):
            main(['--db', str(db_path)])

    def test_sources_exclusive(self, db_path, tmp_path):
        with pytest.raises(SystemExit):
            main(['--db', str(db_path), '--sheet-csv', str(tmp_path), '--sheets-api', '--summary'])

    def test_threshold_range(self, db_path):
        with pytest.raises(SystemExit):
            main(['--db', str(db_path), '--summary', '--threshold', '1.5'])


class TestRun:
    """End-to-end runs against a SQLite database and a CSV export."""

    def test_merge_to_csv(self, db_path, add_match, tmp_path, capsys):
        add_match('Titans', '2025-01-20', stats={'goalsFor': 3})
        add_match('Eagles', '2025-01-13', team_id=2)
        export = tmp_path / 'Match Log.csv'
        export.write_text(
            'Match ID,Date,Opponent,Goals For\n'
            'M1001,1/20/2025,TITANS,2\n'
            'M1002,1/27/2025,Wolves,1\n',
            encoding='utf-8',
        )
        out = tmp_path / 'merged.csv'

        main([
            '--db', str(db_path), '--sheet-csv', str(tmp_path),
            '--team-id', '1', '--output', str(out), '--html', '--summary',
        ])

        with open(out, encoding='utf-8-sig', newline='') as f:
            rows = list(csv.DictReader(f, delimiter=';'))
        assert [(r['Match ID'], r['Opponent'], r['Source']) for r in rows] == [
            ('M1002', 'Wolves', 'SHEET'),
            ('1', 'Titans', 'BOTH'),
        ]
        assert rows[1]['Goals For'] == '3'
        assert out.with_suffix('.html').exists()
        assert re.search(r'Spiele gesamt:\s+2\n', capsys.readouterr().out)

    def test_missing_sheet_export_degrades(self, db_path, add_match, tmp_path, capsys):
        add_match('Titans', '2025-01-20')
        main(['--db', str(db_path), '--sheet-csv', str(tmp_path / 'missing.csv'), '--summary'])
        assert re.search(r'Nur Datenbank:\s+1\n', capsys.readouterr().out)

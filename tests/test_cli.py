"""Tests for the report and Excel export commands."""
import copy
import json
import sys
from datetime import datetime
from unittest.mock import patch

import openpyxl
import pandas as pd
import pytest

from tradejournal.cli.export_to_excel import export_to_excel
from tradejournal.cli.report import build_report, log_report
from tradejournal.core.config import DEFAULT_CONFIG
from tradejournal import run


@pytest.fixture
def trades():
    """Five trades in one week; AAPL carries the P&L."""
    return [
        {'id': 't1', 'ticker': 'AAPL', 'timestamp': '2024-03-04T10:30:00', 'realizedPL': 500.0},
        {'id': 't2', 'ticker': 'AAPL', 'timestamp': '2024-03-05T11:30:00', 'realizedPL': -250.0},
        {'id': 't3', 'ticker': 'AAPL', 'timestamp': '2024-03-06T11:30:00', 'realizedPL': 1000.0},
        {'id': 't4', 'ticker': 'TSLA', 'timestamp': '2024-03-07T14:15:00', 'realizedPL': 100.0},
        {'id': 't5', 'ticker': 'MSFT', 'timestamp': '2024-03-08T09:45:00', 'realizedPL': -90.0},
    ]


@pytest.fixture
def store(tmp_path, trades):
    path = tmp_path / 'trades.json'
    path.write_text(json.dumps(trades))
    return str(path)


class TestExportToExcel:
    """Tests for export_to_excel."""

    def test_sheets(self, tmp_path, trades):
        """Every sheet is written, Insights included when a pattern fires."""
        output = export_to_excel(
            trades, tmp_path / 'report.xlsx', initial_capital=10000, reference_date=datetime(2024, 3, 8)
        )

        workbook = openpyxl.load_workbook(output)
        assert workbook.sheetnames == [
            'Trades', 'Daily PnL', 'Monthly Summary', 'Tickers', 'Projections', 'Statistics', 'Insights',
        ]

    def test_daily_sheet(self, tmp_path, trades):
        output = export_to_excel(trades, tmp_path / 'report.xlsx', reference_date=datetime(2024, 3, 8))
        daily = pd.read_excel(output, sheet_name='Daily PnL')

        assert len(daily) == 5
        assert daily['cumulative_pl'].iloc[-1] == 1260.0

    def test_no_insights_sheet(self, tmp_path, trades):
        """No Insights sheet when the window holds too few trades."""
        output = export_to_excel(trades, tmp_path / 'report.xlsx', reference_date=datetime(2025, 1, 1))
        assert 'Insights' not in openpyxl.load_workbook(output).sheetnames

    def test_empty_journal(self, tmp_path):
        output = export_to_excel([], tmp_path / 'empty.xlsx')
        assert 'Statistics' in openpyxl.load_workbook(output).sheetnames


class TestReport:
    """Tests for the report command."""

    def test_build_report(self, store):
        report = build_report(copy.deepcopy(DEFAULT_CONFIG), store_path=store,
                              initial_capital=10000, reference_date='2024-03-08')

        assert report['metrics']['total_pl'] == 1260.0
        assert report['series_stats']['portfolio_value'] == 11260.0
        assert len(report['projections']) == 5
        assert [p['detector'] for p in report['patterns']] == ['best_ticker']
        assert report['top_tickers'][0]['ticker'] == 'AAPL'
        assert report['goals'][1]['actual'] == 1260.0, "Every trade falls in the week of 2024-03-08"

    def test_capital_from_config(self, store):
        cfg = copy.deepcopy(DEFAULT_CONFIG)
        cfg['analytics']['initial_capital'] = 5000

        report = build_report(cfg, store_path=store)
        assert report['series_stats']['start_value'] == 5000

    def test_log_report(self, store):
        """Logging a report does not fail on any section."""
        report = build_report(copy.deepcopy(DEFAULT_CONFIG), store_path=store, reference_date='2024-03-08')
        log_report(report)


class TestRunner:
    """Tests for the unified CLI runner."""

    def test_export_command(self, store, tmp_path):
        output = tmp_path / 'out.xlsx'
        argv = ['run', 'export', '--store', store, '--output', str(output)]

        with patch.object(sys, 'argv', argv):
            run.main()

        assert output.exists()

    def test_api_command(self):
        """The api command hands the app to uvicorn."""
        with patch.object(sys, 'argv', ['run', 'api', '--port', '9001']), patch('uvicorn.run') as uvicorn_run:
            run.main()

        uvicorn_run.assert_called_once()
        assert uvicorn_run.call_args.args[0] == 'tradejournal.api.main:app'
        assert uvicorn_run.call_args.kwargs['port'] == 9001

    def test_no_command(self):
        with patch.object(sys, 'argv', ['run']):
            with pytest.raises(SystemExit):
                run.main()

    def test_failure_exits_non_zero(self, tmp_path):
        argv = ['run', 'export', '--store', str(tmp_path / 'missing.json')]

        with patch.object(sys, 'argv', argv):
            with pytest.raises(SystemExit) as exc_info:
                run.main()

        assert exc_info.value.code == 1

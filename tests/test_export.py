"""Tests for the Excel exporter."""

from openpyxl import load_workbook

from receipt_riser.export import ExcelExporter, needs_review

RECEIPTS = [
    {'fileName': 'missing.txt', 'merchantName': None, 'amount': 4.0, 'receiptType': 'retail',
     'confidenceScore': 0.6},
    {'fileName': 'shell.txt', 'merchantName': 'SHELL', 'merchantAddress': '123 MAIN ST',
     'transactionDate': '2024-01-15', 'amount': 36.32, 'currency': 'USD', 'receiptType': 'gas',
     'confidenceScore': 1.0},
    {'fileName': 'market.txt', 'merchantName': 'CORNER MARKET', 'amount': 5.0, 'receiptType': 'retail',
     'confidenceScore': 0.85},
]


class TestExcelExporter:
    """Test suite for ExcelExporter."""

    def read_rows(self, path):
        ws = load_workbook(path)['Receipts']
        return [row for row in ws.iter_rows(values_only=True)]

    def test_receipt_rows(self, tmp_path):
        path = tmp_path / 'out' / 'receipts.xlsx'
        ExcelExporter(path).export_receipts(RECEIPTS)

        rows = self.read_rows(path)
        header_index = next(i for i, row in enumerate(rows) if row[0] == "File Name")
        table = rows[header_index + 1:header_index + 4]

        assert [row[0] for row in table] == ['shell.txt', 'market.txt', 'missing.txt']
        assert [row[8] for row in table] == ['OK', 'OK', 'REVIEW']
        assert table[0][1:5] == ('SHELL', '123 MAIN ST', '2024-01-15', 36.32)

    def test_summary(self, tmp_path):
        path = tmp_path / 'receipts.xlsx'
        ExcelExporter(path).export_receipts(RECEIPTS)

        rows = self.read_rows(path)
        totals = next(row for row in rows if row[0] == "Total Receipts:")
        assert totals[1] == 3
        assert totals[4] == 45.32

        breakdown = {row[0]: row[1:3] for row in rows if row[0] in ('gas', 'retail')}
        assert breakdown == {'gas': (1, 36.32), 'retail': (2, 9.0)}

    def test_empty_export(self, tmp_path):
        path = tmp_path / 'receipts.xlsx'
        ExcelExporter(path).export_receipts([])

        rows = self.read_rows(path)
        assert rows[0][0] == "No receipts to summarize"


def test_needs_review():
    assert needs_review({'merchantName': 'SHELL', 'amount': 1.0}) is False
    assert needs_review({'merchantName': '', 'amount': 1.0}) is True
    assert needs_review({'merchantName': 'SHELL', 'amount': None}) is True

"""Excel export of parsed receipts."""

import logging
from typing import List, Dict, Any
from pathlib import Path

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)


COLUMNS = [
    ("File Name", 'fileName', 25),
    ("Merchant", 'merchantName', 25),
    ("Address", 'merchantAddress', 30),
    ("Date", 'transactionDate', 12),
    ("Amount", 'amount', 12),
    ("Currency", 'currency', 10),
    ("Type", 'receiptType', 12),
    ("Confidence", 'confidenceScore', 12),
    ("Status", None, 10),
]


class ExcelExporter:
    """Export parsed receipts to a single Excel sheet with a summary block."""

    def __init__(self, output_path: Path):
        """
        Initialize Excel exporter.

        Args:
            output_path: Path for the output Excel file
        """
        self.output_path = Path(output_path)
        self.workbook = Workbook()

    def export_receipts(self, receipts: List[Dict[str, Any]]):
        """
        Export receipts, as produced by ParsedReceipt.to_dict plus a fileName key.

        Receipts missing a merchant or amount are listed last with status REVIEW.
        """
        try:
            if "Sheet" in self.workbook.sheetnames:
                self.workbook.remove(self.workbook["Sheet"])

            self._create_receipts_sheet(receipts)

            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.workbook.save(str(self.output_path))

            logger.info(f"Excel file exported to: {self.output_path}")

        except Exception as e:
            logger.error(f"Failed to export Excel file: {e}")
            raise

    def _create_receipts_sheet(self, receipts: List[Dict[str, Any]]):
        ws = self.workbook.create_sheet("Receipts")

        current_row = self._add_summary_section(ws, receipts, 1) + 2

        ws.cell(row=current_row, column=1, value="ALL RECEIPTS").font = Font(bold=True, size=14)
        current_row += 2

        for col, (header, _, width) in enumerate(COLUMNS, 1):
            cell = ws.cell(row=current_row, column=col, value=header)
            cell.font = Font(bold=True)
            cell.fill = PatternFill(start_color="E6E6E6", end_color="E6E6E6", fill_type="solid")
            cell.alignment = Alignment(horizontal="center")
            ws.column_dimensions[get_column_letter(col)].width = width
        current_row += 1

        complete = [r for r in receipts if not needs_review(r)]
        incomplete = [r for r in receipts if needs_review(r)]

        for receipt in complete + incomplete:
            status = "REVIEW" if needs_review(receipt) else "OK"
            for col, (_, key, _) in enumerate(COLUMNS, 1):
                value = status if key is None else receipt.get(key)
                ws.cell(row=current_row, column=col, value=value)
            current_row += 1

        logger.info(f"Created receipts sheet with {len(complete)} complete and "
                    f"{len(incomplete)} incomplete receipts")

    def _add_summary_section(self, ws, receipts: List[Dict[str, Any]], start_row: int) -> int:
        """Add totals and a per-type breakdown above the receipt table."""
        if not receipts:
            ws.cell(row=start_row, column=1, value="No receipts to summarize")
            return start_row + 1

        df = pd.DataFrame(receipts)
        if 'amount' not in df.columns:
            df['amount'] = None
        df['amount'] = pd.to_numeric(df['amount'], errors='coerce')

        ws.cell(row=start_row, column=1, value="RECEIPT SUMMARY").font = Font(bold=True, size=14)
        current_row = start_row + 2

        ws.cell(row=current_row, column=1, value="Total Receipts:").font = Font(bold=True)
        ws.cell(row=current_row, column=2, value=len(receipts))
        ws.cell(row=current_row, column=4, value="Total Amount:").font = Font(bold=True)
        ws.cell(row=current_row, column=5, value=round(float(df['amount'].sum()), 2))
        current_row += 2

        if 'receiptType' in df.columns:
            ws.cell(row=current_row, column=1, value="Type Breakdown:").font = Font(bold=True)
            current_row += 1
            ws.cell(row=current_row, column=1, value="Type").font = Font(bold=True)
            ws.cell(row=current_row, column=2, value="Count").font = Font(bold=True)
            ws.cell(row=current_row, column=3, value="Amount").font = Font(bold=True)
            current_row += 1

            breakdown = df.groupby('receiptType')['amount'].agg(['count', 'sum'])
            for receipt_type, data in breakdown.iterrows():
                ws.cell(row=current_row, column=1, value=receipt_type)
                ws.cell(row=current_row, column=2, value=int(data['count']))
                ws.cell(row=current_row, column=3, value=round(float(data['sum']), 2))
                current_row += 1

        return current_row


def needs_review(receipt: Dict[str, Any]) -> bool:
    return not receipt.get('merchantName') or receipt.get('amount') is None

"""
Reorder Export Service

Renders a reorder analysis as an Excel purchasing worksheet: one row per
alert, plus a summary sheet with the per-priority counts.
"""
import io
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from pos_insights.domain.inventory import ReorderAlert, ReorderAnalysis, ReorderPriority

ALERT_HEADERS = [
    "Priority",
    "Product",
    "Variant",
    "Current Stock",
    "Reorder Point",
    "Days to Depletion",
    "Avg Daily Sales",
    "Suggested Qty",
    "Supplier",
    "Unit Cost",
    "Lead Time (days)",
    "Estimated Cost",
]
ALERT_COLUMN_WIDTHS = [12, 40, 20, 15, 15, 18, 16, 15, 25, 12, 16, 16]

INTEGER_COLUMNS = {4, 5, 6, 8, 11}
DECIMAL_COLUMNS = {7}
CURRENCY_COLUMNS = {10, 12}

PRIORITY_FILLS = {
    ReorderPriority.CRITICAL: "F8CBAD",
    ReorderPriority.HIGH: "FFE699",
    ReorderPriority.MEDIUM: "DDEBF7",
    ReorderPriority.LOW: "E2EFDA",
}


class ReorderExportService:
    """Builds the reorder worksheet in memory"""

    def __init__(self):
        self.header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        self.header_font = Font(color="FFFFFF", bold=True, size=12)
        self.border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    @staticmethod
    def _alert_row(alert: ReorderAlert) -> List[Optional[object]]:
        supplier = alert.supplier_info
        return [
            alert.priority.value,
            alert.product_name,
            alert.variant_name,
            alert.current_stock,
            alert.reorder_point,
            alert.days_to_depletion,
            alert.avg_daily_sales,
            alert.suggested_order_qty,
            supplier.supplier_name if supplier else None,
            supplier.cost if supplier else None,
            supplier.lead_time if supplier else None,
            supplier.cost * alert.suggested_order_qty if supplier else None,
        ]

    def _write_header(self, ws, headers: List[str]):
        for col_num, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col_num, value=header)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = self.border

    def generate_reorder_worksheet(self, analysis: ReorderAnalysis) -> io.BytesIO:
        """
        Generate the worksheet for an analysis

        Returns:
            BytesIO positioned at 0 holding the .xlsx file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Reorder Alerts"

        self._write_header(ws, ALERT_HEADERS)

        for row_num, alert in enumerate(analysis.alerts, 2):
            priority_fill = PatternFill(
                start_color=PRIORITY_FILLS[alert.priority],
                end_color=PRIORITY_FILLS[alert.priority],
                fill_type="solid",
            )
            for col_num, value in enumerate(self._alert_row(alert), 1):
                cell = ws.cell(row=row_num, column=col_num, value=value)
                cell.border = self.border
                cell.alignment = Alignment(horizontal='left', vertical='center')

                if col_num == 1:
                    cell.fill = priority_fill
                    cell.font = Font(bold=True)
                elif col_num in INTEGER_COLUMNS:
                    cell.alignment = Alignment(horizontal='right', vertical='center')
                    cell.number_format = '#,##0'
                elif col_num in DECIMAL_COLUMNS:
                    cell.alignment = Alignment(horizontal='right', vertical='center')
                    cell.number_format = '#,##0.00'
                elif col_num in CURRENCY_COLUMNS:
                    cell.alignment = Alignment(horizontal='right', vertical='center')
                    cell.number_format = '$#,##0.00'

        for col_num, width in enumerate(ALERT_COLUMN_WIDTHS, 1):
            ws.column_dimensions[get_column_letter(col_num)].width = width

        # Freeze header row
        ws.freeze_panes = 'A2'

        self._write_summary_sheet(wb, analysis)

        excel_file = io.BytesIO()
        wb.save(excel_file)
        excel_file.seek(0)

        return excel_file

    def _write_summary_sheet(self, wb: Workbook, analysis: ReorderAnalysis):
        ws = wb.create_sheet("Summary")
        self._write_header(ws, ["Priority", "Alerts"])

        summary = analysis.summary
        rows = [
            (ReorderPriority.CRITICAL.value, summary.critical_count),
            (ReorderPriority.HIGH.value, summary.high_count),
            (ReorderPriority.MEDIUM.value, summary.medium_count),
            (ReorderPriority.LOW.value, summary.low_count),
            ("TOTAL", summary.total_alerts),
        ]
        for row_num, (label, count) in enumerate(rows, 2):
            label_cell = ws.cell(row=row_num, column=1, value=label)
            count_cell = ws.cell(row=row_num, column=2, value=count)
            label_cell.border = self.border
            count_cell.border = self.border
            count_cell.alignment = Alignment(horizontal='right', vertical='center')
            if label == "TOTAL":
                label_cell.font = Font(bold=True)
                count_cell.font = Font(bold=True)

        ws.column_dimensions['A'].width = 15
        ws.column_dimensions['B'].width = 12

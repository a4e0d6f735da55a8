# crp_accounting/utils/report_exporters.py

import io
import logging
from typing import Any, Dict, Iterable

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

logger = logging.getLogger(__name__)

# =============================================================================
# General Styling Constants (Excel)
# =============================================================================
HEADER_FONT = Font(bold=True, size=14)
SECTION_FONT = Font(bold=True, size=12)
BOLD_FONT = Font(bold=True)
ACCOUNTING_FORMAT = '#,##0.00_);(#,##0.00)'
RIGHT_ALIGNMENT = Alignment(horizontal='right', vertical='center')

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

# =============================================================================
# Excel Generation Helpers
# =============================================================================

def _format_excel_header(sheet, report_title: str, report_info: Dict[str, Any]) -> int:
    """Adds standard header rows to an Excel sheet; returns the next free row."""
    sheet.cell(row=1, column=1, value=report_title).font = HEADER_FONT
    row = 2
    for key, value in report_info.items():
        sheet.cell(row=row, column=1, value=f"{key}:").font = BOLD_FONT
        sheet.cell(row=row, column=2, value=str(value) if value is not None else '')
        row += 1
    return row + 1


def _amount_cell(sheet, row: int, column: int, value, bold: bool = False):
    cell = sheet.cell(row=row, column=column, value=value)
    cell.number_format = ACCOUNTING_FORMAT
    cell.alignment = RIGHT_ALIGNMENT
    if bold:
        cell.font = BOLD_FONT
    return cell


def _auto_adjust_excel_columns(sheet, min_width=10, max_width=60):
    """Adjusts column widths based on content."""
    for col in sheet.columns:
        max_length = max((len(str(cell.value)) for cell in col if cell.value is not None), default=0)
        sheet.column_dimensions[col[0].column_letter].width = max(min_width, min(max_length + 2, max_width))


def _to_bytes(workbook: Workbook) -> bytes:
    buffer = io.BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()


def _add_section(sheet, row: int, title: str, lines: Iterable[Dict[str, Any]], total_label: str, total) -> int:
    sheet.cell(row=row, column=1, value=title).font = SECTION_FONT
    row += 1
    for line in lines:
        sheet.cell(row=row, column=1, value=line.get('account_code') or '')
        sheet.cell(row=row, column=2, value=line.get('account_name'))
        _amount_cell(sheet, row, 3, line.get('balance'))
        row += 1
    sheet.cell(row=row, column=2, value=total_label).font = BOLD_FONT
    _amount_cell(sheet, row, 3, total, bold=True)
    return row + 2

# =============================================================================
# Trial Balance Exporter
# =============================================================================

def generate_trial_balance_excel(report_data: Dict[str, Any]) -> bytes:
    """Generates a Trial Balance report as an Excel file (.xlsx) in memory."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Trial Balance"

    period = report_data.get('period', {})
    report_info = {
        "Company": report_data.get('company_name'),
        "Start Date": period.get('start_date') or 'Beginning',
        "End Date": period.get('end_date') or 'Latest',
        "Fiscal Year": period.get('fiscal_year') or '-',
        "Fiscal Period": period.get('fiscal_period') or '-',
    }
    row = _format_excel_header(sheet, "Trial Balance", report_info)

    headers = ("Code", "Account", "Type", "Opening", "Debit", "Credit", "Net Debit", "Net Credit")
    for col, header in enumerate(headers, start=1):
        sheet.cell(row=row, column=col, value=header).font = BOLD_FONT
    row += 1

    for entry in report_data.get('rows', []):
        sheet.cell(row=row, column=1, value=entry['account_code'])
        sheet.cell(row=row, column=2, value=entry['account_name'])
        sheet.cell(row=row, column=3, value=entry['account_type'])
        for col, key in enumerate(('opening_balance', 'debit_total', 'credit_total', 'net_debit', 'net_credit'),
                                  start=4):
            _amount_cell(sheet, row, col, entry[key])
        row += 1

    totals = report_data.get('totals', {})
    sheet.cell(row=row, column=2, value="Totals").font = BOLD_FONT
    _amount_cell(sheet, row, 7, totals.get('debit'), bold=True)
    _amount_cell(sheet, row, 8, totals.get('credit'), bold=True)
    row += 1
    sheet.cell(row=row, column=2, value="Difference").font = BOLD_FONT
    _amount_cell(sheet, row, 7, totals.get('difference'), bold=True)
    row += 1
    sheet.cell(row=row, column=2, value="Balanced Check").font = BOLD_FONT
    sheet.cell(row=row, column=7,
               value="Balanced" if report_data.get('is_balanced') else "OUT OF BALANCE").font = BOLD_FONT

    _auto_adjust_excel_columns(sheet)
    logger.debug(f"Trial Balance workbook built with {len(report_data.get('rows', []))} rows.")
    return _to_bytes(workbook)

# =============================================================================
# Balance Sheet Exporter
# =============================================================================

def generate_balance_sheet_excel(report_data: Dict[str, Any]) -> bytes:
    """Generates a Balance Sheet report as an Excel file (.xlsx) in memory."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = f"Balance Sheet {report_data.get('as_of_date')}"[:31]

    report_info = {
        "Company": report_data.get('company_name'),
        "As of Date": report_data.get('as_of_date'),
    }
    row = _format_excel_header(sheet, "Balance Sheet", report_info)

    assets = report_data.get('assets', {})
    liabilities = report_data.get('liabilities', {})
    equity = report_data.get('equity', {})

    row = _add_section(sheet, row, "CURRENT ASSETS", assets.get('current', []),
                       "Total Current Assets", assets.get('current_total'))
    row = _add_section(sheet, row, "FIXED ASSETS", assets.get('fixed', []),
                       "Total Fixed Assets", assets.get('fixed_total'))
    sheet.cell(row=row, column=2, value="Total Assets").font = BOLD_FONT
    _amount_cell(sheet, row, 3, assets.get('total'), bold=True)
    row += 2

    row = _add_section(sheet, row, "CURRENT LIABILITIES", liabilities.get('current', []),
                       "Total Current Liabilities", liabilities.get('current_total'))
    row = _add_section(sheet, row, "LONG-TERM LIABILITIES", liabilities.get('long_term', []),
                       "Total Long-term Liabilities", liabilities.get('long_term_total'))
    sheet.cell(row=row, column=2, value="Total Liabilities").font = BOLD_FONT
    _amount_cell(sheet, row, 3, liabilities.get('total'), bold=True)
    row += 2

    equity_lines = list(equity.get('accounts', []))
    equity_lines.append({
        'account_code': None,
        'account_name': equity.get('retained_earnings_label', "Retained Earnings"),
        'balance': equity.get('retained_earnings'),
    })
    row = _add_section(sheet, row, "EQUITY", equity_lines, "Total Equity", equity.get('total'))

    sheet.cell(row=row, column=2, value="Total Liabilities + Equity").font = BOLD_FONT
    _amount_cell(sheet, row, 3, report_data.get('total_liabilities_and_equity'), bold=True)
    row += 1
    sheet.cell(row=row, column=2, value="Difference").font = BOLD_FONT
    _amount_cell(sheet, row, 3, report_data.get('difference'), bold=True)
    row += 1
    sheet.cell(row=row, column=2, value="Balanced Check").font = BOLD_FONT
    sheet.cell(row=row, column=3,
               value="Balanced" if report_data.get('is_balanced') else "OUT OF BALANCE").font = BOLD_FONT
    row += 2

    summary = report_data.get('revenue_expense_summary', {})
    label = f"Revenue / Expense Summary (FY {summary['fiscal_year']})" if summary.get('fiscal_year') \
        else "Revenue / Expense Summary (cumulative)"
    sheet.cell(row=row, column=1, value=label).font = SECTION_FONT
    row += 1
    for caption, key in (("Total Revenue", 'total_revenue'), ("Total Expense", 'total_expense'),
                         ("Net Income", 'net_income')):
        sheet.cell(row=row, column=2, value=caption)
        _amount_cell(sheet, row, 3, summary.get(key))
        row += 1

    _auto_adjust_excel_columns(sheet, max_width=70)
    return _to_bytes(workbook)

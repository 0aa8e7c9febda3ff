"""
請求書Excel出力モジュール

店舗別の請求書ワークブックとバッチのサマリーCSVを出力します。
"""

import logging
from pathlib import Path
from typing import List

import openpyxl
import pandas as pd
from openpyxl.styles import Alignment, Font
from openpyxl.worksheet.worksheet import Worksheet

from common.error_handling.exceptions import FileProcessingError
from .constants import BillingConstants, InvoiceConstants
from .data_models import StoreInvoice

YEN_FORMAT = '"¥"#,##0;"-¥"#,##0'
DATE_FORMAT = '%Y年%m月%d日'


class StatementWriter:
    """請求書ワークブック出力クラス"""

    ITEM_START_ROW = 9

    def __init__(self, output_dir: Path, encoding: str = 'utf-8-sig'):
        self.output_dir = Path(output_dir)
        self.encoding = encoding
        self.logger = logging.getLogger(__name__)

    def statement_path(self, store_invoice: StoreInvoice) -> Path:
        schedule = store_invoice.schedule
        filename = InvoiceConstants.STATEMENT_FILE_FORMAT.format(
            year=schedule.invoice_year,
            month=schedule.invoice_month,
            store_id=store_invoice.store_id
        )
        return self.output_dir / filename

    def write_statement(self, store_invoice: StoreInvoice) -> Path:
        """店舗の請求書ワークブックを作成"""
        output_path = self.statement_path(store_invoice)
        workbook = openpyxl.Workbook()
        try:
            worksheet = workbook.active
            worksheet.title = '請求書'
            self._write_header(worksheet, store_invoice)
            last_row = self._write_line_items(worksheet, store_invoice)
            self._write_totals(worksheet, store_invoice, last_row + 1)
            self._set_column_widths(worksheet)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(output_path)
        except OSError as e:
            self.logger.error(f"請求書保存エラー: {output_path} - {e}")
            raise FileProcessingError(f"請求書を保存できません: {output_path} - {e}")
        finally:
            workbook.close()

        self.logger.info(f"請求書を作成しました: {output_path}")
        return output_path

    def _write_header(self, worksheet: Worksheet, store_invoice: StoreInvoice) -> None:
        schedule = store_invoice.schedule
        worksheet['A1'] = '請求書'
        worksheet['A1'].font = Font(size=16, bold=True)
        worksheet['A3'] = f"{store_invoice.store_name} 御中"
        worksheet['A3'].font = Font(size=12, bold=True)
        worksheet['A4'] = f"{schedule.invoice_year}年{schedule.invoice_month_label}分 請求"
        worksheet['D3'] = '発行日'
        worksheet['E3'] = schedule.issue_date.strftime(DATE_FORMAT)
        worksheet['D4'] = '支払期限'
        worksheet['E4'] = schedule.due_date.strftime(DATE_FORMAT)
        worksheet['D5'] = '店舗ID'
        worksheet['E5'] = store_invoice.store_id

        header_row = self.ITEM_START_ROW - 1
        for column, title in enumerate(['項目', '数量', '単価', '金額', '備考'], start=1):
            cell = worksheet.cell(row=header_row, column=column, value=title)
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal='center')

    def _item_label(self, key: str, label: str, store_invoice: StoreInvoice) -> str:
        schedule = store_invoice.schedule
        if key == 'panel_fee':
            return f"{schedule.panel_month_label}{label}"
        if key == 'referral_charge':
            return f"{schedule.referral_month_label}{label}"
        return label

    def _item_note(self, key: str, store_invoice: StoreInvoice) -> str:
        invoice = store_invoice.invoice
        terms = store_invoice.terms
        if key == 'panel_fee' and invoice.is_panel_fee_waived:
            return '掲載料免除'
        if key == 'referral_charge':
            return f"スタッフ{store_invoice.staff_guest_count}名 / 外部{store_invoice.outstaff_guest_count}名"
        if key == 'under_guarantee_penalty' and invoice.is_under_guarantee:
            return f"保証{terms.guarantee_count}名に対し{invoice.guest_count}名"
        if key == 'shortfall_charge' and invoice.is_under_guarantee:
            return f"不足{invoice.shortfall_count}名 × ¥{BillingConstants.SHORTFALL_CHARGE_PER_PERSON:,}"
        return ''

    def _write_line_items(self, worksheet: Worksheet, store_invoice: StoreInvoice) -> int:
        row = self.ITEM_START_ROW
        for item in store_invoice.invoice.line_items():
            worksheet.cell(row=row, column=1, value=self._item_label(item['key'], item['label'], store_invoice))
            worksheet.cell(row=row, column=2, value=item['quantity'])
            worksheet.cell(row=row, column=3, value=item['unit_price']).number_format = YEN_FORMAT
            worksheet.cell(row=row, column=4, value=item['amount']).number_format = YEN_FORMAT
            worksheet.cell(row=row, column=5, value=self._item_note(item['key'], store_invoice))
            row += 1
        return row

    def _write_totals(self, worksheet: Worksheet, store_invoice: StoreInvoice, start_row: int) -> None:
        invoice = store_invoice.invoice
        totals = [
            ('小計', invoice.subtotal),
            (f"消費税（{BillingConstants.TAX_RATE_PERCENT}%）", invoice.tax),
            ('合計', invoice.total),
        ]
        for offset, (label, amount) in enumerate(totals):
            row = start_row + offset
            worksheet.cell(row=row, column=3, value=label).font = Font(bold=True)
            amount_cell = worksheet.cell(row=row, column=4, value=amount)
            amount_cell.number_format = YEN_FORMAT
            amount_cell.font = Font(bold=True)

    @staticmethod
    def _set_column_widths(worksheet: Worksheet) -> None:
        for column, width in zip('ABCDE', (24, 8, 12, 14, 30)):
            worksheet.column_dimensions[column].width = width

    def write_summary_csv(self, store_invoices: List[StoreInvoice], invoice_year: int, invoice_month: int) -> Path:
        """バッチ全店舗の請求サマリーCSVを出力"""
        output_path = self.output_dir / InvoiceConstants.SUMMARY_FILE_FORMAT.format(
            year=invoice_year, month=invoice_month
        )
        df = pd.DataFrame([store_invoice.to_dict() for store_invoice in store_invoices])

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(output_path, index=False, encoding=self.encoding)
        except OSError as e:
            self.logger.error(f"サマリーCSV保存エラー: {output_path} - {e}")
            raise FileProcessingError(f"サマリーCSVを保存できません: {output_path} - {e}")

        self.logger.info(f"請求サマリーを出力しました: {output_path} ({len(df)}店舗)")
        return output_path

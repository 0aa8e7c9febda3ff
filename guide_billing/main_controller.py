"""
メインコントローラーモジュール

月次請求バッチの処理フローを統合管理します。
案内記録・店舗テーブルのエクスポートCSVを読み込み、店舗別に請求書を作成します。
"""

from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from common.config.config_manager import ConfigManager
from common.data_models import ProcessingResult, ProcessingSummary
from common.error_handling.error_handler import ErrorHandler
from common.error_handling.exceptions import (
    FileProcessingError,
    GuideBillingError,
    ValidationError
)
from common.file_handlers.csv_handler import CSVHandler
from common.logging.unified_logger import UnifiedLogger
from .business_date import BusinessDateResolver
from .data_models import MonthlyAggregate, StoreContractTerms, StoreInvoice, VisitRecord, is_absent
from .invoice_calculator import compute_invoice
from .invoice_schedule import InvoiceSchedule, build_schedule
from .statement_writer import StatementWriter
from .visit_aggregator import VisitAggregator, records_to_frame


class BillingController:
    """月次請求バッチのコントローラークラス"""

    VISIT_REQUIRED_COLUMNS = ['store_id', 'guest_count']
    STORE_REQUIRED_COLUMNS = ['store_id']

    def __init__(self, config_manager: Optional[ConfigManager] = None, log_level: Optional[str] = None):
        self.config = config_manager or ConfigManager()
        logging_settings = self.config.get_logging_settings()
        self.unified_logger = UnifiedLogger(
            'guide_billing',
            log_level or logging_settings['log_level'],
            logging_settings['log_file']
        )
        self.logger = self.unified_logger.logger

        self.config.validate_configuration()
        self.unified_logger.log_configuration_info(self.config.get_all_settings())
        self.billing_settings = self.config.get_billing_settings()

        self.error_handler = ErrorHandler(self.logger)
        self.csv_handler = CSVHandler(self.logger, self.error_handler)
        self.resolver = BusinessDateResolver.from_config(self.config)
        self.aggregator = VisitAggregator(self.resolver)
        self.default_terms = self.config.get_default_contract_terms()

    def load_visits(self, visits_csv: Path) -> Tuple[pd.DataFrame, List[str]]:
        """案内記録CSVを読み込み（不正な行はスキップしてエラーに記録）"""
        raw = self._read_export(visits_csv, self.VISIT_REQUIRED_COLUMNS)

        records = []
        errors = []
        for row_number, row in enumerate(raw.to_dict('records'), start=2):
            try:
                records.append(VisitRecord.from_record(row))
            except GuideBillingError as e:
                self.error_handler.log_and_continue(e, f"案内記録 {visits_csv} {row_number}行目")
                errors.append(f"案内記録{row_number}行目: {e}")

        self.logger.info(f"案内記録を読み込みました: {len(records)}件 (スキップ {len(errors)}件)")
        return records_to_frame(records), errors

    def load_stores(self, stores_csv: Path) -> Tuple[List[Dict[str, Any]], List[str]]:
        """店舗CSVを読み込み（store_idのない行はスキップしてエラーに記録）"""
        raw = self._read_export(stores_csv, self.STORE_REQUIRED_COLUMNS)

        stores = []
        errors = []
        for row_number, row in enumerate(raw.to_dict('records'), start=2):
            if is_absent(row.get('store_id')):
                error = ValidationError(f"store_idがありません: {stores_csv} {row_number}行目")
                self.error_handler.log_and_continue(error, f"店舗データ {row_number}行目")
                errors.append(f"店舗データ{row_number}行目: {error}")
                continue
            stores.append({**row, 'store_id': str(row['store_id']).strip()})

        self.logger.info(f"店舗データを読み込みました: {len(stores)}件 (スキップ {len(errors)}件)")
        return stores, errors

    def split_duplicate_stores(self, stores: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], List[str]]:
        """store_idが重複する店舗を分離（重複した店舗はどの行も請求しない）"""
        counts = Counter(store['store_id'] for store in stores)
        duplicated = sorted(store_id for store_id, count in counts.items() if count > 1)
        if duplicated:
            self.logger.warning(f"store_idが重複しています: {duplicated}")
        unique = [store for store in stores if counts[store['store_id']] == 1]
        return unique, duplicated

    def _read_export(self, file_path: Path, required_columns: List[str]) -> pd.DataFrame:
        file_path = Path(file_path)
        try:
            df = self.csv_handler.read_csv_with_encoding_detection(file_path, dtype={'store_id': str})
        except FileProcessingError as e:
            self.error_handler.handle_file_processing_error(e, file_path)
            raise

        if not self.csv_handler.validate_csv_structure(df, required_column_names=required_columns):
            if df.empty and all(column in df.columns for column in required_columns):
                return df
            raise FileProcessingError(f"CSVの列構成が不正です: {file_path.name} (必須列: {required_columns})")
        return df

    def build_store_invoice(self, store: Mapping[str, Any], schedule: InvoiceSchedule,
                            aggregate: Optional[MonthlyAggregate]) -> StoreInvoice:
        """店舗1件分の請求書を作成"""
        store_id = str(store['store_id'])
        terms = StoreContractTerms.from_record(store, self.default_terms)
        guest_count = aggregate.guest_count if aggregate else 0
        invoice = compute_invoice(terms, guest_count)

        name = store.get('name')
        store_name = str(name) if isinstance(name, str) and name.strip() else store_id

        return StoreInvoice(
            store_id=store_id,
            store_name=store_name,
            schedule=schedule,
            terms=terms,
            invoice=invoice,
            staff_guest_count=aggregate.staff_guest_count if aggregate else 0,
            outstaff_guest_count=aggregate.outstaff_guest_count if aggregate else 0
        )

    def run(self, invoice_year, invoice_month, visits_csv: Path, stores_csv: Path,
            output_dir: Optional[Path] = None, store_ids: Optional[Iterable[str]] = None,
            write_statements: bool = True) -> ProcessingSummary:
        """月次請求バッチを実行"""
        schedule = build_schedule(
            invoice_year, invoice_month,
            self.billing_settings['invoice_issue_day'],
            self.billing_settings['invoice_due_day']
        )
        summary = ProcessingSummary(
            invoice_year=schedule.invoice_year,
            invoice_month=schedule.invoice_month,
            processing_start=datetime.now()
        )
        writer = StatementWriter(output_dir or Path(self.billing_settings['output_dir']),
                                 self.billing_settings['encoding'])

        self.logger.info(
            f"請求処理を開始: {schedule.invoice_year}年{schedule.invoice_month}月発行 "
            f"(紹介料 {schedule.referral_year}年{schedule.referral_month}月分 / "
            f"掲載料金 {schedule.panel_year}年{schedule.panel_month}月分)"
        )

        visits_df, visit_errors = self.load_visits(visits_csv)
        summary.errors.extend(visit_errors)
        stores, store_errors = self.load_stores(stores_csv)
        summary.errors.extend(store_errors)

        if store_ids is not None:
            wanted = {str(store_id) for store_id in store_ids}
            stores = [store for store in stores if store['store_id'] in wanted]
            self.logger.info(f"店舗フィルター適用: {sorted(wanted)} - {len(stores)}件")

        stores, duplicated = self.split_duplicate_stores(stores)
        for store_id in duplicated:
            result = ProcessingResult(store_id=store_id, success=True)
            error = ValidationError(f"店舗データでstore_idが重複しています: {store_id}")
            self.error_handler.handle_validation_error(error, store_id)
            result.add_error(str(error))
            summary.add_result(result)

        aggregates = {
            aggregate.store_id: aggregate
            for aggregate in self.aggregator.monthly_aggregates(
                visits_df, schedule.referral_year, schedule.referral_month
            )
        }

        store_invoices = []
        for index, store in enumerate(stores, start=1):
            store_id = str(store['store_id'])
            self.unified_logger.log_processing_progress(index, len(stores), store_id)
            result, store_invoice = self._process_store(
                store, schedule, aggregates.get(store_id), writer, write_statements
            )
            if result.success:
                store_invoices.append(store_invoice)
            summary.add_result(result)

        if store_invoices:
            writer.write_summary_csv(store_invoices, schedule.invoice_year, schedule.invoice_month)

        summary.processing_end = datetime.now()
        self.unified_logger.log_processing_summary(
            summary.total_stores,
            summary.successful_stores,
            summary.failed_stores,
            summary.processing_duration or 0.0
        )
        self.logger.info(f"請求総額（税込）: ¥{summary.total_billed:,}")
        return summary

    def _process_store(self, store: Mapping[str, Any], schedule: InvoiceSchedule,
                       aggregate: Optional[MonthlyAggregate], writer: StatementWriter,
                       write_statements: bool) -> Tuple[ProcessingResult, Optional[StoreInvoice]]:
        store_id = str(store['store_id'])
        result = ProcessingResult(store_id=store_id, success=True)

        try:
            store_invoice = self.build_store_invoice(store, schedule, aggregate)
        except ValidationError as e:
            self.error_handler.handle_validation_error(e, store_id)
            result.add_error(str(e))
            return result, None

        result.invoice = store_invoice.invoice.to_dict()
        self.unified_logger.log_invoice(store_id, result.invoice)

        if store_invoice.invoice.subtotal < 0:
            self.logger.warning(f"[{store_id}] 小計がマイナスです: ¥{store_invoice.invoice.subtotal:,}")

        if write_statements:
            try:
                result.output_file = str(writer.write_statement(store_invoice))
            except FileProcessingError as e:
                self.error_handler.log_and_continue(e, f"請求書出力 {store_id}")
                result.add_error(str(e))

        return result, store_invoice

"""
共通コンポーネントの統合テスト
"""
import json
import logging
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta
from pathlib import Path
import sys

import pandas as pd

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))

from common import (
    CSVHandler,
    ConfigManager,
    ConfigurationError,
    EncodingDetector,
    ErrorHandler,
    FileProcessingError,
    ProcessingResult,
    ProcessingSummary,
    UnifiedLogger,
    ValidationError
)


STORE_NAMES = [
    'クラブ 花園', '銀座 月光', '新宿 桜並木', '六本木 夜想曲', '池袋 宝石箱',
    '渋谷 星空', '赤坂 紅葉', '上野 藤棚', '恵比寿 水面', '中野 白百合',
] * 3


class TestCommonComponents(unittest.TestCase):
    """共通コンポーネントの統合テスト"""

    def setUp(self):
        """テスト前の準備"""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.logger = UnifiedLogger("test_logger")
        self.error_handler = ErrorHandler(self.logger.logger)
        self.csv_handler = CSVHandler(self.logger.logger, self.error_handler)
        self.encoding_detector = EncodingDetector(self.logger.logger)

    def tearDown(self):
        """テスト後のクリーンアップ"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _store_frame(self):
        return pd.DataFrame({
            'store_id': [f"s{index:03d}" for index in range(len(STORE_NAMES))],
            'name': STORE_NAMES,
            'panel_fee': [30000] * len(STORE_NAMES)
        })

    def test_csv_handler_with_utf8_bom(self):
        """BOM付きUTF-8（管理画面エクスポート）の読み込みテスト"""
        csv_file = self.temp_dir / "stores_bom.csv"
        self._store_frame().to_csv(csv_file, index=False, encoding='utf-8-sig')

        self.assertEqual(self.encoding_detector.detect_encoding(csv_file), 'utf-8-sig')
        df = self.csv_handler.read_csv_with_encoding_detection(csv_file, dtype={'store_id': str})

        self.assertEqual(list(df.columns), ['store_id', 'name', 'panel_fee'])
        self.assertEqual(df['store_id'].iloc[0], 's000')
        self.assertIn('銀座 月光', df['name'].values)

    def test_csv_handler_with_utf8(self):
        """BOMなしUTF-8の読み込みテスト"""
        csv_file = self.temp_dir / "stores_utf8.csv"
        self._store_frame().to_csv(csv_file, index=False, encoding='utf-8')

        self.assertEqual(self.encoding_detector.detect_encoding(csv_file), 'utf-8')
        df = self.csv_handler.read_csv_with_encoding_detection(csv_file)
        self.assertEqual(len(df), len(STORE_NAMES))

    def test_csv_handler_with_cp932(self):
        """Excelで再保存されたcp932の読み込みテスト"""
        csv_file = self.temp_dir / "stores_cp932.csv"
        self._store_frame().to_csv(csv_file, index=False, encoding='cp932')

        df = self.csv_handler.try_multiple_encodings(csv_file, ['utf-8', 'cp932'])
        self.assertIn('新宿 桜並木', df['name'].values)

    def test_csv_handler_missing_file(self):
        missing = self.temp_dir / "missing.csv"
        with self.assertRaises(FileProcessingError):
            self.csv_handler.read_csv_with_encoding_detection(missing)
        self.assertIsNone(self.csv_handler.read_csv_safe(missing))

    def test_validate_csv_structure(self):
        df = self._store_frame()
        self.assertTrue(self.csv_handler.validate_csv_structure(df, required_column_names=['store_id']))
        self.assertFalse(self.csv_handler.validate_csv_structure(df, required_column_names=['guest_count']))
        self.assertFalse(self.csv_handler.validate_csv_structure(df.iloc[0:0]))

    def test_encoding_detector_try_encodings(self):
        csv_file = self.temp_dir / "stores_cp932.csv"
        self._store_frame().to_csv(csv_file, index=False, encoding='cp932')
        self.assertFalse(self.encoding_detector.validate_encoding(csv_file, 'utf-8'))
        self.assertEqual(self.encoding_detector.try_encodings(csv_file, ['utf-8', 'cp932']), 'cp932')

    def test_error_handler_summary(self):
        errors = [ValidationError("a"), ValidationError("b"), FileProcessingError("c")]
        summary = self.error_handler.create_error_summary(errors)

        self.assertEqual(summary['total_errors'], 3)
        self.assertEqual(summary['error_types'], {'ValidationError': 2, 'FileProcessingError': 1})
        self.assertEqual(summary['first_error'], 'a')
        self.assertEqual(self.error_handler.create_error_summary([]), {'total_errors': 0, 'error_types': {}})

    def test_error_handler_log_and_raise(self):
        with self.assertRaises(ValidationError):
            self.error_handler.log_and_raise(ValidationError("panel_feeが不正"), "test")

    def test_unified_logger_invoice(self):
        with self.assertLogs('test_logger', level='INFO') as captured:
            self.logger.log_invoice('raize', {'panel_fee': 30000, 'guest_count': 5,
                                              'is_under_guarantee': True, 'total': 39600})
        output = "\n".join(captured.output)
        self.assertIn('panel_fee: ¥30,000', output)
        self.assertIn('guest_count: 5', output)
        self.assertIn('is_under_guarantee: True', output)
        self.assertIn('total: ¥39,600', output)

    def test_unified_logger_masks_secrets(self):
        with self.assertLogs('test_logger', level='INFO') as captured:
            self.logger.log_configuration_info({'api_token': 'abcd', 'output_dir': 'invoices'})
        output = "\n".join(captured.output)
        self.assertIn('api_token: ****', output)
        self.assertIn('output_dir: invoices', output)

    def test_unified_logger_file(self):
        log_file = self.temp_dir / "logs" / "billing.log"
        file_logger = UnifiedLogger("test_file_logger", "DEBUG", log_file)
        file_logger.info("請求処理テスト")
        for handler in file_logger.logger.handlers:
            handler.flush()
            handler.close()
        file_logger.logger.handlers.clear()

        self.assertIn("請求処理テスト", log_file.read_text(encoding='utf-8'))

    def test_processing_summary(self):
        summary = ProcessingSummary(invoice_year=2025, invoice_month=8)

        ok = ProcessingResult(store_id='raize', success=True, invoice={'total': 39600})
        ng = ProcessingResult(store_id='bad', success=True)
        ng.add_error("panel_feeに負の値は指定できません")

        summary.add_result(ok)
        summary.add_result(ng)
        summary.processing_start = datetime(2025, 8, 5, 9, 0, 0)
        summary.processing_end = summary.processing_start + timedelta(seconds=3)

        self.assertEqual(summary.total_stores, 2)
        self.assertEqual(summary.successful_stores, 1)
        self.assertEqual(summary.failed_stores, 1)
        self.assertEqual(summary.total_billed, 39600)
        self.assertEqual(summary.success_rate, 50.0)
        self.assertEqual(summary.processing_duration, 3.0)
        self.assertEqual(summary.errors, ["bad: panel_feeに負の値は指定できません"])
        self.assertEqual(summary.to_dict()['total_errors'], 1)
        self.assertEqual(ng.total, 0)


class TestConfigManager(unittest.TestCase):
    """設定管理のテスト"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.logger = logging.getLogger("test_config")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, data):
        config_file = self.temp_dir / "guide_billing_config.json"
        config_file.write_text(json.dumps(data), encoding='utf-8')
        return config_file

    def test_overrides_are_merged_with_defaults(self):
        config = ConfigManager(self._write_config({
            'business_day_start_hour': 2,
            'default_contract_terms': {'guarantee_count': 5}
        }), self.logger)

        self.assertEqual(config.get_timezone_settings(), {'utc_offset_hours': 9, 'business_day_start_hour': 2})
        terms = config.get_default_contract_terms()
        self.assertEqual(terms['guarantee_count'], 5)
        self.assertEqual(terms['panel_fee'], 30000)
        self.assertEqual(config.get_billing_settings()['invoice_issue_day'], 5)
        self.assertTrue(config.validate_configuration())

    def test_invalid_values(self):
        for data in [{'utc_offset_hours': 20}, {'business_day_start_hour': 24},
                     {'invoice_due_day': 31}, {'default_contract_terms': {'panel_fee': -1}}]:
            with self.subTest(data=data):
                config = ConfigManager(self._write_config(data), self.logger)
                with self.assertRaises(ConfigurationError):
                    config.validate_configuration()

    def test_broken_json(self):
        config_file = self.temp_dir / "broken.json"
        config_file.write_text("{not json", encoding='utf-8')
        with self.assertRaises(ConfigurationError):
            ConfigManager(config_file, self.logger)

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            ConfigManager(self.temp_dir / "missing.json", self.logger)

    def test_save_and_reload(self):
        config = ConfigManager(self._write_config({}), self.logger)
        config.update_config({'output_dir': 'out/invoices'})
        saved = self.temp_dir / "saved.json"
        config.save_config(saved)

        reloaded = ConfigManager(saved, self.logger)
        self.assertEqual(reloaded.get('output_dir'), 'out/invoices')
        self.assertEqual(reloaded.get_all_settings(), config.get_all_settings())


if __name__ == '__main__':
    unittest.main()

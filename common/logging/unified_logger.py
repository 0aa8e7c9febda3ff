"""
統一ロギングシステム
"""
import logging
from pathlib import Path
from typing import Dict, Any, Optional


class UnifiedLogger:
    """統一ロギングシステムクラス"""

    def __init__(self, name: str = __name__, level: str = "INFO", log_file: Optional[Path] = None):
        self.logger = self.setup_logger(name, level, log_file)

    def setup_logger(self, name: str, level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
        """ロガーをセットアップ"""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # 既存のハンドラーをクリア
        logger.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        return logger

    def log_processing_progress(self, current: int, total: int, item: str) -> None:
        """処理進捗のログ出力"""
        percentage = (current / total) * 100 if total > 0 else 0
        message = f"処理進捗: {current}/{total} ({percentage:.1f}%) - {item}"
        self.logger.info(message)

    def log_processing_summary(self, processed_count: int, success_count: int, error_count: int,
                               duration_seconds: float) -> None:
        """処理結果サマリーのログ出力"""
        success_rate = (success_count / processed_count) * 100 if processed_count > 0 else 0

        self.logger.info("=" * 50)
        self.logger.info("請求処理結果サマリー")
        self.logger.info(f"対象店舗数: {processed_count}")
        self.logger.info(f"成功数: {success_count}")
        self.logger.info(f"エラー数: {error_count}")
        self.logger.info(f"成功率: {success_rate:.1f}%")
        self.logger.info(f"処理時間: {duration_seconds:.2f}秒")
        self.logger.info("=" * 50)

    def log_configuration_info(self, config: Dict[str, Any]) -> None:
        """設定情報のログ出力"""
        self.logger.info("設定情報:")
        for key, value in config.items():
            # パスワードや秘密情報をマスク
            if any(secret in key.lower() for secret in ['password', 'secret', 'key', 'token']):
                value = '*' * len(str(value)) if value else 'None'
            self.logger.info(f"  {key}: {value}")

    def log_invoice(self, store_id: str, invoice: Dict[str, Any]) -> None:
        """店舗別請求内訳のログ出力"""
        self.logger.info(f"[{store_id}] 請求内訳:")
        for key, value in invoice.items():
            if isinstance(value, bool):
                self.logger.info(f"  {key}: {value}")
            elif isinstance(value, int) and ('fee' in key or 'charge' in key or 'penalty' in key or key in ('subtotal', 'tax', 'total')):
                self.logger.info(f"  {key}: ¥{value:,}")
            else:
                self.logger.info(f"  {key}: {value}")

    def info(self, message: str) -> None:
        """情報レベルのログ出力"""
        self.logger.info(message)

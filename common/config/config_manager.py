"""
中央集約設定管理システム
"""
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from ..error_handling.exceptions import ConfigurationError


class ConfigManager:
    """設定管理の統一クラス

    タイムゾーンは実行ホストのローカル設定を使わず、
    ここで設定したUTCオフセットを全ての日付計算に渡す。
    """

    DEFAULT_CONFIG_FILES = [
        'guide_billing_config.json',
        'config.json'
    ]

    DEFAULT_CONTRACT_TERMS = {
        'panel_fee': 30000,
        'charge_per_person': 3000,
        'guarantee_count': 8,
        'under_guarantee_penalty': 0
    }

    def __init__(self, config_path: Optional[Path] = None, logger=None):
        self.logger = logger or logging.getLogger(__name__)
        self.config_path = config_path
        self.config_data = {}
        self.load_config(config_path)

    def load_config(self, config_path: Optional[Path] = None) -> Dict[str, Any]:
        """設定ファイルを読み込み"""
        if config_path:
            loaded = self._load_single_config(Path(config_path))
            self.config_data = {**self._get_default_config(), **loaded}
        else:
            # デフォルトの設定ファイルを順次試行
            for config_file in self.DEFAULT_CONFIG_FILES:
                candidate = Path(config_file)
                if not candidate.exists():
                    continue
                try:
                    loaded = self._load_single_config(candidate)
                except ConfigurationError as e:
                    self.logger.debug(f"設定ファイル読み込み失敗: {config_file} - {str(e)}")
                    continue
                self.config_data = {**self._get_default_config(), **loaded}
                self.config_path = candidate
                break

            if not self.config_data:
                self.logger.warning("設定ファイルが見つかりません。デフォルト設定を使用します。")
                self.config_data = self._get_default_config()

        return self.config_data

    def _load_single_config(self, config_path: Path) -> Dict[str, Any]:
        """単一の設定ファイルを読み込み"""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"設定ファイルが見つかりません: {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"設定ファイルの形式が無効です: {config_path} - {str(e)}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"設定ファイルの最上位はオブジェクトである必要があります: {config_path}")

        self.logger.info(f"設定ファイル読み込み成功: {config_path.name}")
        return config_data

    def _get_default_config(self) -> Dict[str, Any]:
        """デフォルト設定を取得"""
        return {
            'utc_offset_hours': 9,
            'business_day_start_hour': 1,
            'invoice_issue_day': 5,
            'invoice_due_day': 25,
            'default_contract_terms': dict(self.DEFAULT_CONTRACT_TERMS),
            'output_dir': 'invoices',
            'encoding': 'utf-8-sig',
            'log_level': 'INFO',
            'log_file': None
        }

    def get(self, key: str, default: Any = None) -> Any:
        """設定値を取得"""
        return self.config_data.get(key, default)

    def get_timezone_settings(self) -> Dict[str, int]:
        """日付解決の設定を取得"""
        return {
            'utc_offset_hours': self.get('utc_offset_hours', 9),
            'business_day_start_hour': self.get('business_day_start_hour', 1)
        }

    def get_billing_settings(self) -> Dict[str, Any]:
        """請求書発行関連の設定を取得"""
        return {
            'invoice_issue_day': self.get('invoice_issue_day', 5),
            'invoice_due_day': self.get('invoice_due_day', 25),
            'output_dir': self.get('output_dir', 'invoices'),
            'encoding': self.get('encoding', 'utf-8-sig')
        }

    def get_default_contract_terms(self) -> Dict[str, int]:
        """契約条件の欠損時に使う既定値を取得（個別キーの上書きを許可）"""
        terms = dict(self.DEFAULT_CONTRACT_TERMS)
        terms.update(self.get('default_contract_terms') or {})
        return terms

    def get_logging_settings(self) -> Dict[str, Any]:
        """ログ関連の設定を取得"""
        return {
            'log_level': self.get('log_level', 'INFO'),
            'log_file': self.get('log_file')
        }

    def validate_configuration(self) -> bool:
        """設定の妥当性を検証"""
        errors = []

        offset = self.get('utc_offset_hours')
        if not isinstance(offset, int) or isinstance(offset, bool) or not -12 <= offset <= 14:
            errors.append(f"utc_offset_hours は -12〜14 の整数で指定してください: {offset}")

        start_hour = self.get('business_day_start_hour')
        if not isinstance(start_hour, int) or isinstance(start_hour, bool) or not 0 <= start_hour <= 23:
            errors.append(f"business_day_start_hour は 0〜23 の整数で指定してください: {start_hour}")

        for key in ('invoice_issue_day', 'invoice_due_day'):
            day = self.get(key)
            if not isinstance(day, int) or isinstance(day, bool) or not 1 <= day <= 28:
                errors.append(f"{key} は 1〜28 の整数で指定してください: {day}")

        for key, value in self.get_default_contract_terms().items():
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(f"default_contract_terms.{key} は0以上の整数で指定してください: {value}")

        if errors:
            error_msg = f"設定値が不正です: {errors}"
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

        self.logger.info("設定の妥当性検証完了")
        return True

    def save_config(self, config_path: Optional[Path] = None) -> None:
        """設定をファイルに保存"""
        if config_path is None:
            config_path = self.config_path or Path(self.DEFAULT_CONFIG_FILES[0])

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config_data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            error_msg = f"設定ファイル保存エラー: {config_path} - {str(e)}"
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

        self.logger.info(f"設定ファイル保存完了: {config_path}")

    def update_config(self, updates: Dict[str, Any]) -> None:
        """設定を更新"""
        self.config_data.update(updates)
        self.logger.info(f"設定更新: {list(updates.keys())}")

    def get_all_settings(self) -> Dict[str, Any]:
        """すべての設定を取得"""
        return self.config_data.copy()

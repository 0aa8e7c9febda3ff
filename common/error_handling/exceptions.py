"""
統一例外クラス定義
"""


class GuideBillingError(Exception):
    """案内請求システムの基本例外クラス"""
    pass


class InvalidDateError(GuideBillingError):
    """日付・年月の指定が不正な場合のエラー"""
    pass


class ValidationError(GuideBillingError):
    """請求計算の入力値が不正な場合のエラー（負数・非整数など）"""
    pass


class ConfigurationError(GuideBillingError):
    """設定関連のエラー"""
    pass


class FileProcessingError(GuideBillingError):
    """ファイル処理関連のエラー"""
    pass


class EncodingDetectionError(GuideBillingError):
    """エンコーディング検出関連のエラー"""
    pass

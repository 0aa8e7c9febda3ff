"""
エンコーディング検出ユーティリティ
"""
import chardet
from pathlib import Path
from typing import List, Optional
from ..error_handling.exceptions import EncodingDetectionError


class EncodingDetector:
    """ファイルのエンコーディングを検出するユーティリティクラス"""

    # 管理画面からのエクスポートはBOM付きUTF-8、Excel経由の再保存はcp932になる
    DEFAULT_ENCODINGS = ['utf-8-sig', 'utf-8', 'cp932', 'shift_jis', 'euc-jp']

    def __init__(self, logger=None):
        self.logger = logger

    def detect_encoding(self, file_path: Path) -> str:
        """ファイルのエンコーディングを検出"""
        try:
            with open(file_path, 'rb') as f:
                raw_data = f.read()
        except OSError as e:
            if self.logger:
                self.logger.error(f"エンコーディング検出エラー: {file_path.name} - {str(e)}")
            raise EncodingDetectionError(f"エンコーディング検出に失敗: {str(e)}")

        if raw_data.startswith(b'\xef\xbb\xbf'):
            return 'utf-8-sig'

        # BOMなしUTF-8は厳密デコードで判定
        try:
            raw_data.decode('utf-8')
            return 'utf-8'
        except UnicodeDecodeError:
            pass

        result = chardet.detect(raw_data)
        if not result['encoding']:
            if self.logger:
                self.logger.warning(f"エンコーディング検出失敗: {file_path.name}")
            return 'utf-8'

        detected_encoding = result['encoding'].lower()
        # ASCIIのみのファイルはUTF-8として扱う
        if detected_encoding == 'ascii':
            detected_encoding = 'utf-8'
        if self.logger:
            self.logger.info(f"エンコーディング検出: {file_path.name} -> {detected_encoding} (信頼度: {result['confidence']:.2f})")
        return detected_encoding

    def try_encodings(self, file_path: Path, encodings: Optional[List[str]] = None) -> str:
        """複数のエンコーディングを順次試行して最初に成功したものを返す"""
        if encodings is None:
            encodings = self.DEFAULT_ENCODINGS

        for encoding in encodings:
            if self.validate_encoding(file_path, encoding):
                if self.logger:
                    self.logger.info(f"エンコーディング試行成功: {file_path.name} -> {encoding}")
                return encoding

        raise EncodingDetectionError(f"すべてのエンコーディングで読み込みに失敗: {file_path.name}")

    def validate_encoding(self, file_path: Path, encoding: str) -> bool:
        """指定されたエンコーディングでファイルが読み込み可能かチェック"""
        try:
            with open(file_path, 'r', encoding=encoding) as f:
                f.read()
            return True
        except (UnicodeDecodeError, UnicodeError, LookupError):
            return False

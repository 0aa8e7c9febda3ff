"""
標準化されたデータモデル
"""
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from datetime import datetime


@dataclass
class ProcessingResult:
    """店舗単位の請求処理結果"""
    store_id: str
    success: bool
    invoice: Dict[str, Any] = field(default_factory=dict)
    output_file: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_error(self, error: str) -> None:
        """エラーを追加"""
        self.errors.append(error)
        self.success = False

    @property
    def total(self) -> int:
        """税込請求額（失敗時は0）"""
        return int(self.invoice.get('total', 0)) if self.success else 0

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return {
            'store_id': self.store_id,
            'success': self.success,
            'output_file': self.output_file,
            'errors_count': len(self.errors),
            **self.invoice,
            **self.metadata
        }


@dataclass
class ProcessingSummary:
    """請求バッチ処理のサマリー"""
    invoice_year: int
    invoice_month: int
    total_stores: int = 0
    successful_stores: int = 0
    failed_stores: int = 0
    total_billed: int = 0
    processing_start: Optional[datetime] = None
    processing_end: Optional[datetime] = None
    store_results: Dict[str, ProcessingResult] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """成功率を計算"""
        if self.total_stores == 0:
            return 0.0
        return (self.successful_stores / self.total_stores) * 100

    @property
    def processing_duration(self) -> Optional[float]:
        """処理時間を計算（秒）"""
        if self.processing_start and self.processing_end:
            return (self.processing_end - self.processing_start).total_seconds()
        return None

    def add_result(self, result: ProcessingResult) -> None:
        """処理結果を追加"""
        self.store_results[result.store_id] = result
        self.total_stores += 1

        if result.success:
            self.successful_stores += 1
            self.total_billed += result.total
        else:
            self.failed_stores += 1
            self.errors.extend(f"{result.store_id}: {error}" for error in result.errors)

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return {
            'invoice_year': self.invoice_year,
            'invoice_month': self.invoice_month,
            'total_stores': self.total_stores,
            'successful_stores': self.successful_stores,
            'failed_stores': self.failed_stores,
            'success_rate': self.success_rate,
            'total_billed': self.total_billed,
            'processing_duration': self.processing_duration,
            'processing_start': self.processing_start.isoformat() if self.processing_start else None,
            'processing_end': self.processing_end.isoformat() if self.processing_end else None,
            'total_errors': len(self.errors)
        }

"""
案内請求パッケージ

営業日・暦月の日付範囲解決と、店舗別の月次請求計算を提供します。
"""

from .business_date import (
    BusinessDateResolver,
    DateRange,
    local_date_key_of,
    next_month,
    previous_month,
    resolve_day_range,
    resolve_month_range
)
from .data_models import (
    Invoice,
    MonthlyAggregate,
    StoreContractTerms,
    StoreInvoice,
    VisitRecord,
    parse_optional_yen
)
from .invoice_calculator import compute_invoice, guarantee_remaining, target_progress
from .invoice_schedule import InvoiceSchedule, build_schedule
from .visit_aggregator import VisitAggregator, records_to_frame

__all__ = [
    'BusinessDateResolver',
    'DateRange',
    'local_date_key_of',
    'next_month',
    'previous_month',
    'resolve_day_range',
    'resolve_month_range',
    'Invoice',
    'MonthlyAggregate',
    'StoreContractTerms',
    'StoreInvoice',
    'VisitRecord',
    'parse_optional_yen',
    'compute_invoice',
    'guarantee_remaining',
    'target_progress',
    'InvoiceSchedule',
    'build_schedule',
    'VisitAggregator',
    'records_to_frame'
]

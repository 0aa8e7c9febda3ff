"""
案内記録集計モジュール

案内記録をDataFrameに変換し、営業日・暦月の範囲で絞り込んで集計します。
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from common.error_handling.exceptions import ValidationError
from .business_date import BusinessDateResolver, DateLike, DateRange, validate_year_month
from .constants import StaffTypes
from .data_models import MonthlyAggregate, VisitRecord

VISIT_COLUMNS = ['id', 'store_id', 'guest_count', 'staff_name', 'guided_at', 'staff_type']


def records_to_frame(records: Union[pd.DataFrame, Iterable[Union[VisitRecord, Dict[str, Any]]]]) -> pd.DataFrame:
    """案内記録（VisitRecord・辞書・エクスポートDataFrame）を正規化したDataFrameに変換"""
    if isinstance(records, pd.DataFrame):
        records = records.to_dict('records')

    rows = []
    for record in records:
        if not isinstance(record, VisitRecord):
            record = VisitRecord.from_record(record)
        rows.append(record.to_dict())

    df = pd.DataFrame(rows, columns=VISIT_COLUMNS)
    df['guided_at'] = pd.to_datetime(df['guided_at'], utc=True)
    df['guest_count'] = df['guest_count'].astype('int64')
    return df


class VisitAggregator:
    """案内記録の期間絞り込み・集計クラス"""

    def __init__(self, resolver: Optional[BusinessDateResolver] = None):
        self.resolver = resolver or BusinessDateResolver()
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _validate_staff_type(staff_type: Optional[str]) -> None:
        if staff_type is not None and staff_type not in StaffTypes.ALL:
            raise ValidationError(f"staff_typeが不正です: {staff_type!r}")

    def filter_range(self, df: pd.DataFrame, date_range: DateRange,
                     store_id: Optional[str] = None, staff_type: Optional[str] = None,
                     ascending: bool = True) -> pd.DataFrame:
        """時刻範囲 [start, end) と店舗・スタッフ区分で絞り込み"""
        self._validate_staff_type(staff_type)

        start = pd.Timestamp(date_range.start)
        end = pd.Timestamp(date_range.end)
        mask = (df['guided_at'] >= start) & (df['guided_at'] < end)
        if store_id is not None:
            mask &= df['store_id'] == str(store_id)
        if staff_type is not None:
            mask &= df['staff_type'] == staff_type

        return df[mask].sort_values('guided_at', ascending=ascending).copy()

    def business_day_records(self, df: pd.DataFrame, local_date: DateLike,
                             store_id: Optional[str] = None,
                             staff_type: Optional[str] = None) -> pd.DataFrame:
        """営業日（1:00切り替え）の案内記録"""
        date_range = self.resolver.resolve_day_range(local_date)
        return self.filter_range(df, date_range, store_id=store_id, staff_type=staff_type)

    def monthly_aggregates(self, df: pd.DataFrame, year, month,
                           staff_type: Optional[str] = None) -> List[MonthlyAggregate]:
        """暦月の店舗別集計"""
        year, month = validate_year_month(year, month)
        period = self.filter_range(df, self.resolver.resolve_month_range(year, month), staff_type=staff_type)

        aggregates = []
        for store_id, group in period.groupby('store_id', sort=True):
            by_type = group.groupby('staff_type')['guest_count'].sum()
            aggregates.append(MonthlyAggregate(
                store_id=str(store_id),
                year=year,
                month=month,
                guest_count=int(group['guest_count'].sum()),
                staff_guest_count=int(by_type.get(StaffTypes.STAFF, 0)),
                outstaff_guest_count=int(by_type.get(StaffTypes.OUTSTAFF, 0)),
                visit_count=int(len(group))
            ))

        self.logger.debug(f"{year}年{month}月の集計: {len(aggregates)}店舗, {len(period)}件")
        return aggregates

    def monthly_guest_count(self, df: pd.DataFrame, store_id: str, year, month,
                            staff_type: Optional[str] = None) -> int:
        """店舗の暦月の案内人数合計"""
        year, month = validate_year_month(year, month)
        period = self.filter_range(df, self.resolver.resolve_month_range(year, month),
                                   store_id=store_id, staff_type=staff_type)
        return int(period['guest_count'].sum())

    def daily_guest_counts(self, df: pd.DataFrame, year, month,
                           store_id: Optional[str] = None) -> Dict[str, int]:
        """暦月内の日別案内人数（現地の暦日でグルーピング）"""
        year, month = validate_year_month(year, month)
        period = self.filter_range(df, self.resolver.resolve_month_range(year, month), store_id=store_id)
        if period.empty:
            return {}

        keys = period['guided_at'].map(self.resolver.local_date_key_of)
        totals = period.groupby(keys)['guest_count'].sum()
        return {str(key): int(value) for key, value in totals.sort_index().items()}

    def staff_ranking(self, df: pd.DataFrame, date_range: DateRange,
                      staff_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """スタッフ別の案内人数ランキング（人数の多い順、同数は名前順）"""
        period = self.filter_range(df, date_range, staff_type=staff_type)
        if period.empty:
            return []

        grouped = period.groupby('staff_name').agg(
            guest_count=('guest_count', 'sum'),
            visit_count=('guest_count', 'size')
        ).reset_index()
        grouped = grouped.sort_values(['guest_count', 'staff_name'], ascending=[False, True])

        return [
            {
                'staff_name': row.staff_name,
                'guest_count': int(row.guest_count),
                'visit_count': int(row.visit_count)
            }
            for row in grouped.itertuples(index=False)
        ]

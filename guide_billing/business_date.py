"""
営業日・日付範囲解決モジュール

ナイト営業の「営業日」は現地時間1:00に切り替わる（0:00〜0:59は前日扱い）。
日次の案内記録は営業日境界で、月次集計は暦月境界（現地0:00）で絞り込む。

全ての変換は固定UTCオフセット（既定: JST, UTC+9, 夏時間なし）で行い、
実行ホストのローカルタイムゾーンは一切参照しない。
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Dict, NamedTuple, Optional, Tuple, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from common.error_handling.exceptions import ConfigurationError, InvalidDateError
from .constants import CalendarConstants

DateLike = Union[date, str]
InstantLike = Union[datetime, str]

_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


class DateRange(NamedTuple):
    """半開区間 [start, end) のUTC時刻範囲"""
    start: datetime
    end: datetime

    def contains(self, instant: InstantLike) -> bool:
        """時刻が範囲内か判定（start <= t < end）"""
        moment = to_utc_instant(instant)
        return self.start <= moment < self.end

    def to_query_params(self) -> Dict[str, str]:
        """外部データストアの範囲フィルタ用パラメータ（gte / lt）"""
        return {
            'gte': format_utc_instant(self.start),
            'lt': format_utc_instant(self.end)
        }


def to_utc_instant(value: InstantLike) -> datetime:
    """タイムゾーン付き日時またはISO文字列をUTCのdatetimeに正規化"""
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidDateError("日時が空です")
        try:
            value = isoparse(text)
        except (ValueError, OverflowError) as e:
            raise InvalidDateError(f"日時の形式が不正です: {text!r} ({e})")

    if not isinstance(value, datetime):
        raise InvalidDateError(f"日時にはdatetimeまたはISO文字列を指定してください: {value!r}")

    # タイムゾーンなしの日時はホスト依存になるため受け付けない
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidDateError(f"タイムゾーン情報のない日時は扱えません: {value.isoformat()}")

    try:
        return value.astimezone(timezone.utc)
    except OverflowError:
        raise InvalidDateError(f"日時が範囲外です: {value.isoformat()}")


def format_utc_instant(instant: datetime) -> str:
    """UTCのミリ秒精度ISO文字列（例: 2025-07-30T16:00:00.000Z）"""
    moment = to_utc_instant(instant)
    return moment.strftime('%Y-%m-%dT%H:%M:%S') + f".{moment.microsecond // 1000:03d}Z"


def parse_local_date(value: DateLike) -> date:
    """dateまたはYYYY-MM-DD文字列を暦日に変換"""
    if isinstance(value, datetime):
        raise InvalidDateError(f"日時ではなく暦日を指定してください: {value.isoformat()}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_PATTERN.match(value.strip()):
        raise InvalidDateError(f"日付はYYYY-MM-DD形式で指定してください: {value!r}")

    year, month, day = (int(part) for part in value.strip().split('-'))
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(f"存在しない日付です: {value} ({e})")


def _to_int(value, name: str) -> int:
    """年・月などの整数引数を検証（数字文字列も許可）"""
    if isinstance(value, bool):
        raise InvalidDateError(f"{name}に真偽値は指定できません: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise InvalidDateError(f"{name}は整数で指定してください: {value!r}")


def validate_year_month(year, month) -> Tuple[int, int]:
    year = _to_int(year, '年')
    month = _to_int(month, '月')
    if not 1 <= month <= 12:
        raise InvalidDateError(f"月は1〜12で指定してください: {month}")
    if not 1 <= year <= 9998:
        raise InvalidDateError(f"年が範囲外です: {year}")
    return year, month


def previous_month(year, month) -> Tuple[int, int]:
    """前月の（年, 月）"""
    year, month = validate_year_month(year, month)
    if (year, month) == (1, 1):
        raise InvalidDateError("1年1月の前月は扱えません")
    prev = date(year, month, 1) - relativedelta(months=1)
    return prev.year, prev.month


def next_month(year, month) -> Tuple[int, int]:
    """翌月の（年, 月）"""
    year, month = validate_year_month(year, month)
    following = date(year, month, 1) + relativedelta(months=1)
    return following.year, following.month


class BusinessDateResolver:
    """固定タイムゾーンでの営業日・暦月の範囲解決クラス"""

    def __init__(self, utc_offset_hours: int = CalendarConstants.JST_UTC_OFFSET_HOURS,
                 business_day_start_hour: int = CalendarConstants.BUSINESS_DAY_START_HOUR):
        if isinstance(utc_offset_hours, bool) or not isinstance(utc_offset_hours, int) \
                or not -12 <= utc_offset_hours <= 14:
            raise ConfigurationError(f"UTCオフセットが不正です: {utc_offset_hours}")
        self.business_day_start_hour = self._validate_hour(business_day_start_hour, ConfigurationError)
        self.utc_offset_hours = utc_offset_hours
        self.tz = timezone(timedelta(hours=utc_offset_hours))

    @classmethod
    def from_config(cls, config_manager) -> 'BusinessDateResolver':
        """ConfigManagerの設定から生成"""
        settings = config_manager.get_timezone_settings()
        return cls(settings['utc_offset_hours'], settings['business_day_start_hour'])

    @staticmethod
    def _validate_hour(hour, error_class=InvalidDateError) -> int:
        if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
            raise error_class(f"切り替え時刻は0〜23の整数で指定してください: {hour!r}")
        return hour

    @staticmethod
    def _to_utc_range(start_local: datetime, end_local: datetime) -> DateRange:
        try:
            return DateRange(start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc))
        except OverflowError:
            raise InvalidDateError(f"UTCに変換できない日付です: {start_local.date().isoformat()}")

    def resolve_day_range(self, local_date: DateLike, offset_hour: Optional[int] = None) -> DateRange:
        """営業日の範囲を解決

        local_date の offset_hour:00 から翌暦日の offset_hour:00 まで（終端は含まない）。
        """
        hour = self.business_day_start_hour if offset_hour is None else self._validate_hour(offset_hour)
        target = parse_local_date(local_date)

        try:
            following = target + timedelta(days=1)
        except OverflowError:
            raise InvalidDateError(f"日付が範囲外です: {target.isoformat()}")

        start_local = datetime(target.year, target.month, target.day, hour, tzinfo=self.tz)
        end_local = datetime(following.year, following.month, following.day, hour, tzinfo=self.tz)

        return self._to_utc_range(start_local, end_local)

    def resolve_month_range(self, year, month) -> DateRange:
        """暦月の範囲を解決（月は1始まり、営業日の切り替え時刻は適用しない）"""
        year, month = validate_year_month(year, month)

        start_local = datetime(year, month, 1, tzinfo=self.tz)
        end_local = start_local + relativedelta(months=1)

        return self._to_utc_range(start_local, end_local)

    def _to_local(self, instant: InstantLike) -> datetime:
        moment = to_utc_instant(instant)
        try:
            return moment.astimezone(self.tz)
        except OverflowError:
            raise InvalidDateError(f"現地時刻に変換できない日時です: {moment.isoformat()}")

    def local_date_key_of(self, instant: InstantLike) -> str:
        """表示用の日別グルーピングキー（現地の暦日、0:00境界）"""
        local = self._to_local(instant)
        return local.strftime(CalendarConstants.DATE_KEY_FORMAT)

    def business_date_of(self, instant: InstantLike) -> date:
        """時刻が属する営業日（切り替え時刻より前は前日扱い）"""
        local = self._to_local(instant)
        try:
            return (local - timedelta(hours=self.business_day_start_hour)).date()
        except OverflowError:
            raise InvalidDateError(f"営業日が範囲外です: {local.isoformat()}")

    def current_business_date(self, now: Optional[InstantLike] = None) -> date:
        """現在の営業日"""
        return self.business_date_of(now if now is not None else datetime.now(timezone.utc))

    def format_business_day_label(self, business_date: DateLike) -> str:
        """営業日の表示ラベル（例: 7/31(木)）"""
        target = parse_local_date(business_date)
        weekday = CalendarConstants.WEEKDAY_LABELS[target.weekday()]
        return f"{target.month}/{target.day}({weekday})"


_default_resolver = BusinessDateResolver()


def resolve_day_range(local_date: DateLike,
                      offset_hour: int = CalendarConstants.BUSINESS_DAY_START_HOUR) -> DateRange:
    """JST固定での営業日範囲"""
    return _default_resolver.resolve_day_range(local_date, offset_hour)


def resolve_month_range(year, month) -> DateRange:
    """JST固定での暦月範囲"""
    return _default_resolver.resolve_month_range(year, month)


def local_date_key_of(instant: InstantLike) -> str:
    """JST固定での日別グルーピングキー"""
    return _default_resolver.local_date_key_of(instant)

"""
データモデル定義

案内記録・店舗契約条件・月次集計・請求書のデータクラスを定義します。
"""

import numbers
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from common.config.config_manager import ConfigManager
from common.error_handling.exceptions import ValidationError
from .business_date import to_utc_instant
from .invoice_schedule import InvoiceSchedule
from .constants import BillingConstants, StaffTypes


def is_absent(value: Any) -> bool:
    """未設定扱いの値か（None・空文字・NaN）。0は未設定ではない"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_optional_yen(value: Any, field_name: str = 'value') -> Optional[int]:
    """金額・人数などの0以上の整数値を解釈

    未設定（None・空文字・NaN）はNoneを返し、明示的な0は0のまま返す。
    panel_fee=0（掲載料免除）や male_price=0（男性不可）のように
    0自体が意味を持つ項目はすべてこの関数で解釈する。
    """
    if is_absent(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name}に真偽値は指定できません: {value!r}")

    if isinstance(value, numbers.Integral):
        parsed = int(value)
    elif isinstance(value, numbers.Real):
        if not float(value).is_integer():
            raise ValidationError(f"{field_name}は整数で指定してください: {value!r}")
        parsed = int(value)
    elif isinstance(value, str):
        text = value.strip().replace(',', '')
        try:
            parsed = int(text)
        except ValueError:
            raise ValidationError(f"{field_name}は整数で指定してください: {value!r}")
    else:
        raise ValidationError(f"{field_name}の型が不正です: {type(value).__name__}")

    if parsed < 0:
        raise ValidationError(f"{field_name}に負の値は指定できません: {parsed}")
    return parsed


def _require_non_negative_int(value: Any, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name}は整数で指定してください: {value!r}")
    if value < 0:
        raise ValidationError(f"{field_name}に負の値は指定できません: {value}")


@dataclass(frozen=True)
class VisitRecord:
    """案内記録（1回の案内）"""
    store_id: str
    guest_count: int
    staff_name: str
    guided_at: datetime
    staff_type: str = StaffTypes.STAFF
    record_id: Optional[str] = None

    def __post_init__(self):
        _require_non_negative_int(self.guest_count, 'guest_count')
        if self.guest_count == 0:
            raise ValidationError("guest_countは1以上で指定してください")
        if self.staff_type not in StaffTypes.ALL:
            raise ValidationError(f"staff_typeが不正です: {self.staff_type!r}")
        object.__setattr__(self, 'guided_at', to_utc_instant(self.guided_at))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'VisitRecord':
        """データストアのエクスポート行から生成"""
        store_id = record.get('store_id')
        if is_absent(store_id):
            raise ValidationError("store_idがありません")

        guest_count = parse_optional_yen(record.get('guest_count'), 'guest_count')
        if guest_count is None:
            raise ValidationError(f"guest_countがありません: store_id={store_id}")

        # 旧データは visited_at、さらに古いものは created_at のみ
        guided_at = None
        for column in ('guided_at', 'visited_at', 'created_at'):
            if not is_absent(record.get(column)):
                guided_at = record.get(column)
                break
        if guided_at is None:
            raise ValidationError(f"案内日時がありません: store_id={store_id}")

        staff_name = record.get('staff_name')
        staff_type = record.get('staff_type')
        record_id = record.get('id')

        return cls(
            store_id=str(store_id),
            guest_count=guest_count,
            staff_name='' if is_absent(staff_name) else str(staff_name),
            guided_at=guided_at,
            staff_type=StaffTypes.STAFF if is_absent(staff_type) else str(staff_type).strip(),
            record_id=None if is_absent(record_id) else str(record_id)
        )

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return {
            'id': self.record_id,
            'store_id': self.store_id,
            'guest_count': self.guest_count,
            'staff_name': self.staff_name,
            'guided_at': self.guided_at,
            'staff_type': self.staff_type
        }


@dataclass(frozen=True)
class StoreContractTerms:
    """店舗の請求契約条件"""
    panel_fee: int
    charge_per_person: int
    guarantee_count: int
    under_guarantee_penalty: int

    def __post_init__(self):
        for field_name in BillingConstants.CONTRACT_FIELDS:
            _require_non_negative_int(getattr(self, field_name), field_name)

    @property
    def is_panel_fee_waived(self) -> bool:
        return self.panel_fee == 0

    @classmethod
    def from_record(cls, record: Mapping[str, Any],
                    defaults: Optional[Mapping[str, int]] = None) -> 'StoreContractTerms':
        """店舗テーブルの行から生成

        各項目は未設定のときだけ個別に既定値で補完する。明示的な0は保持する。
        """
        if defaults is None:
            defaults = ConfigManager.DEFAULT_CONTRACT_TERMS

        values = {}
        for field_name in BillingConstants.CONTRACT_FIELDS:
            value = parse_optional_yen(record.get(field_name), field_name)
            if value is None:
                for alias in BillingConstants.LEGACY_ALIASES.get(field_name, ()):
                    value = parse_optional_yen(record.get(alias), alias)
                    if value is not None:
                        break
            if value is None:
                value = defaults.get(field_name, ConfigManager.DEFAULT_CONTRACT_TERMS[field_name])
            values[field_name] = value

        return cls(**values)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class MonthlyAggregate:
    """店舗別・月別の案内人数集計"""
    store_id: str
    year: int
    month: int
    guest_count: int = 0
    staff_guest_count: int = 0
    outstaff_guest_count: int = 0
    visit_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Invoice:
    """請求計算結果（明細を含む）"""
    panel_fee: int
    charge_per_person: int
    guest_count: int
    referral_charge: int
    is_panel_fee_waived: bool
    is_under_guarantee: bool
    shortfall_count: int
    shortfall_charge: int
    under_guarantee_penalty_applied: int
    subtotal: int
    tax: int
    total: int

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式で出力"""
        return asdict(self)

    def line_items(self) -> List[Dict[str, Any]]:
        """明細行（該当しない項目も金額0で含める）"""
        return [
            {
                'key': 'panel_fee',
                'label': '掲載料金',
                'quantity': 1,
                'unit_price': self.panel_fee,
                'amount': self.panel_fee
            },
            {
                'key': 'referral_charge',
                'label': '紹介料',
                'quantity': self.guest_count,
                'unit_price': self.charge_per_person,
                'amount': self.referral_charge
            },
            {
                'key': 'under_guarantee_penalty',
                'label': '保証割れ料金',
                'quantity': 1 if self.is_under_guarantee else 0,
                'unit_price': self.under_guarantee_penalty_applied,
                'amount': -self.under_guarantee_penalty_applied
            },
            {
                'key': 'shortfall_charge',
                'label': '保証割れ人数料金',
                'quantity': self.shortfall_count,
                'unit_price': BillingConstants.SHORTFALL_CHARGE_PER_PERSON,
                'amount': -self.shortfall_charge
            },
        ]


@dataclass(frozen=True)
class StoreInvoice:
    """店舗別の請求書（請求スケジュール・請求計算結果・集計を束ねる）"""
    store_id: str
    store_name: str
    schedule: InvoiceSchedule
    terms: StoreContractTerms
    invoice: Invoice
    staff_guest_count: int = 0
    outstaff_guest_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """サマリーCSV用の辞書"""
        return {
            'store_id': self.store_id,
            'store_name': self.store_name,
            'invoice_year': self.schedule.invoice_year,
            'invoice_month': self.schedule.invoice_month,
            'referral_month': f"{self.schedule.referral_year}-{self.schedule.referral_month:02d}",
            'panel_month': f"{self.schedule.panel_year}-{self.schedule.panel_month:02d}",
            'staff_guest_count': self.staff_guest_count,
            'outstaff_guest_count': self.outstaff_guest_count,
            **self.invoice.to_dict()
        }

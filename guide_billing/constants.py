"""
定数定義モジュール
"""

from typing import Tuple


class BillingConstants:
    """請求計算に関する定数"""
    # 保証割れ人数1名あたりの料金（一律、店舗の紹介単価とは無関係）
    SHORTFALL_CHARGE_PER_PERSON = 3000
    TAX_RATE_PERCENT = 10

    CONTRACT_FIELDS: Tuple[str, ...] = (
        'panel_fee',
        'charge_per_person',
        'guarantee_count',
        'under_guarantee_penalty'
    )

    # 旧カラム名（主カラムが未設定のときだけ参照する）
    LEGACY_ALIASES = {
        'panel_fee': ('base_fee', 'base_price'),
        'charge_per_person': ('unit_price',),
    }


class CalendarConstants:
    """日付解決に関する定数"""
    JST_UTC_OFFSET_HOURS = 9
    BUSINESS_DAY_START_HOUR = 1
    DATE_KEY_FORMAT = "%Y-%m-%d"
    WEEKDAY_LABELS: Tuple[str, ...] = ('月', '火', '水', '木', '金', '土', '日')


class StaffTypes:
    """案内スタッフ区分"""
    STAFF = 'staff'
    OUTSTAFF = 'outstaff'
    ALL: Tuple[str, ...] = (STAFF, OUTSTAFF)


class InvoiceConstants:
    """請求書発行に関する定数"""
    DEFAULT_ISSUE_DAY = 5
    DEFAULT_DUE_DAY = 25
    STATEMENT_FILE_FORMAT = "{year}{month:02d}_{store_id}.xlsx"
    SUMMARY_FILE_FORMAT = "{year}{month:02d}_billing_summary.csv"

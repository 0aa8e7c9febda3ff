"""
請求スケジュールモジュール

N月発行の請求書 = (N+1)月分の掲載料金 + (N-1)月分の紹介料。
発行日はN月5日、支払期限はN月25日（設定で変更可）。
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict

from common.error_handling.exceptions import InvalidDateError
from .business_date import next_month, previous_month, validate_year_month
from .constants import InvoiceConstants


@dataclass(frozen=True)
class InvoiceSchedule:
    """請求月ごとの対象期間と発行日"""
    invoice_year: int
    invoice_month: int
    referral_year: int
    referral_month: int
    panel_year: int
    panel_month: int
    issue_date: date
    due_date: date

    @property
    def invoice_month_label(self) -> str:
        return f"{self.invoice_month}月"

    @property
    def referral_month_label(self) -> str:
        return f"{self.referral_month}月"

    @property
    def panel_month_label(self) -> str:
        return f"{self.panel_month}月"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'invoice_year': self.invoice_year,
            'invoice_month': self.invoice_month,
            'referral_year': self.referral_year,
            'referral_month': self.referral_month,
            'panel_year': self.panel_year,
            'panel_month': self.panel_month,
            'issue_date': self.issue_date.isoformat(),
            'due_date': self.due_date.isoformat()
        }


def build_schedule(invoice_year, invoice_month,
                   issue_day: int = InvoiceConstants.DEFAULT_ISSUE_DAY,
                   due_day: int = InvoiceConstants.DEFAULT_DUE_DAY) -> InvoiceSchedule:
    """請求年月から対象期間・発行日・支払期限を決定"""
    invoice_year, invoice_month = validate_year_month(invoice_year, invoice_month)
    referral_year, referral_month = previous_month(invoice_year, invoice_month)
    panel_year, panel_month = next_month(invoice_year, invoice_month)

    try:
        issue_date = date(invoice_year, invoice_month, issue_day)
        due_date = date(invoice_year, invoice_month, due_day)
    except (TypeError, ValueError) as e:
        raise InvalidDateError(f"発行日・支払期限が不正です: issue_day={issue_day}, due_day={due_day} ({e})")

    if due_date < issue_date:
        raise InvalidDateError(f"支払期限が発行日より前です: {issue_date} > {due_date}")

    return InvoiceSchedule(
        invoice_year=invoice_year,
        invoice_month=invoice_month,
        referral_year=referral_year,
        referral_month=referral_month,
        panel_year=panel_year,
        panel_month=panel_month,
        issue_date=issue_date,
        due_date=due_date
    )

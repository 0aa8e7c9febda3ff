"""
請求計算モジュール

掲載料金・紹介料・保証割れ料金・消費税から月次請求額を計算します。
入出力を持たない純粋な計算で、同じ入力には常に同じ結果を返します。
"""

from typing import Any, Dict

from common.error_handling.exceptions import ValidationError
from .constants import BillingConstants
from .data_models import Invoice, StoreContractTerms


def _validate_count(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name}は整数で指定してください: {value!r}")
    if value < 0:
        raise ValidationError(f"{name}に負の値は指定できません: {value}")
    return value


def calculate_tax(subtotal: int) -> int:
    """消費税（10%、切り捨て）

    小計が負の場合も負の無限大方向に切り捨てる。
    """
    if isinstance(subtotal, bool) or not isinstance(subtotal, int):
        raise ValidationError(f"小計は整数で指定してください: {subtotal!r}")
    return subtotal * BillingConstants.TAX_RATE_PERCENT // 100


def compute_invoice(terms: StoreContractTerms, guest_count: int) -> Invoice:
    """契約条件と期間内の案内人数から請求書を計算"""
    if not isinstance(terms, StoreContractTerms):
        raise ValidationError(f"契約条件の型が不正です: {type(terms).__name__}")
    guest_count = _validate_count(guest_count, 'guest_count')

    referral_charge = guest_count * terms.charge_per_person
    is_panel_fee_waived = terms.panel_fee == 0

    if is_panel_fee_waived:
        # 掲載料免除の店舗は保証本数の判定をしない
        is_under_guarantee = False
        shortfall_count = 0
        shortfall_charge = 0
        penalty_applied = 0
        subtotal = referral_charge
    else:
        is_under_guarantee = guest_count < terms.guarantee_count
        shortfall_count = terms.guarantee_count - guest_count if is_under_guarantee else 0
        shortfall_charge = shortfall_count * BillingConstants.SHORTFALL_CHARGE_PER_PERSON
        penalty_applied = terms.under_guarantee_penalty if is_under_guarantee else 0
        subtotal = terms.panel_fee + referral_charge
        if is_under_guarantee:
            # 0未満になってもクランプしない
            subtotal = subtotal - penalty_applied - shortfall_charge

    tax = calculate_tax(subtotal)

    return Invoice(
        panel_fee=terms.panel_fee,
        charge_per_person=terms.charge_per_person,
        guest_count=guest_count,
        referral_charge=referral_charge,
        is_panel_fee_waived=is_panel_fee_waived,
        is_under_guarantee=is_under_guarantee,
        shortfall_count=shortfall_count,
        shortfall_charge=shortfall_charge,
        under_guarantee_penalty_applied=penalty_applied,
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax
    )


def guarantee_remaining(terms: StoreContractTerms, guest_count: int) -> int:
    """保証本数までの残り人数（達成済み・保証なし・掲載料免除は0）"""
    guest_count = _validate_count(guest_count, 'guest_count')
    if terms.is_panel_fee_waived or terms.guarantee_count == 0:
        return 0
    return max(0, terms.guarantee_count - guest_count)


def target_progress(count: int, target: int) -> Dict[str, Any]:
    """月間目標本数に対する進捗"""
    count = _validate_count(count, 'count')
    target = _validate_count(target, 'target')
    achieved = count >= target
    return {
        'count': count,
        'target': target,
        'achieved': achieved,
        'remaining': 0 if achieved else target - count,
        'excess': count - target if achieved else 0
    }

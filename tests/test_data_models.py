"""
データモデルのテスト
"""
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

import pandas as pd

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.error_handling.exceptions import InvalidDateError, ValidationError
from guide_billing.data_models import StoreContractTerms, VisitRecord, parse_optional_yen


class TestParseOptionalYen(unittest.TestCase):
    """parse_optional_yenのテスト"""

    def test_absent_values(self):
        for value in [None, '', '   ', float('nan'), pd.NA, pd.NaT]:
            with self.subTest(value=value):
                self.assertIsNone(parse_optional_yen(value))

    def test_zero_is_kept(self):
        self.assertEqual(parse_optional_yen(0), 0)
        self.assertEqual(parse_optional_yen('0'), 0)
        self.assertEqual(parse_optional_yen(0.0), 0)

    def test_numeric_forms(self):
        self.assertEqual(parse_optional_yen(30000), 30000)
        self.assertEqual(parse_optional_yen(30000.0), 30000)
        self.assertEqual(parse_optional_yen(pd.Series([3000]).iloc[0]), 3000)
        self.assertEqual(parse_optional_yen('30,000'), 30000)

    def test_invalid_values(self):
        for value in [-1, '-500', 1.5, 'abc', True, [1]]:
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    parse_optional_yen(value, 'panel_fee')


class TestStoreContractTerms(unittest.TestCase):
    """店舗契約条件のテスト"""

    def test_all_defaults(self):
        terms = StoreContractTerms.from_record({})
        self.assertEqual(terms.to_dict(), {
            'panel_fee': 30000,
            'charge_per_person': 3000,
            'guarantee_count': 8,
            'under_guarantee_penalty': 0
        })

    def test_zero_panel_fee_is_kept(self):
        """panel_fee=0 は既定値で補完せず掲載料免除として扱う"""
        terms = StoreContractTerms.from_record({'panel_fee': 0})
        self.assertEqual(terms.panel_fee, 0)
        self.assertTrue(terms.is_panel_fee_waived)
        self.assertEqual(terms.guarantee_count, 8)

    def test_missing_panel_fee_is_defaulted(self):
        for value in [None, '', float('nan')]:
            with self.subTest(value=value):
                terms = StoreContractTerms.from_record({'panel_fee': value})
                self.assertEqual(terms.panel_fee, 30000)
                self.assertFalse(terms.is_panel_fee_waived)

    def test_fields_default_independently(self):
        terms = StoreContractTerms.from_record({'charge_per_person': 5000, 'guarantee_count': 0})
        self.assertEqual(terms.panel_fee, 30000)
        self.assertEqual(terms.charge_per_person, 5000)
        self.assertEqual(terms.guarantee_count, 0)
        self.assertEqual(terms.under_guarantee_penalty, 0)

    def test_legacy_aliases(self):
        self.assertEqual(StoreContractTerms.from_record({'base_fee': 20000}).panel_fee, 20000)
        self.assertEqual(StoreContractTerms.from_record({'panel_fee': None, 'base_price': 10000}).panel_fee, 10000)
        self.assertEqual(StoreContractTerms.from_record({'unit_price': 2500}).charge_per_person, 2500)

    def test_primary_field_wins_over_alias(self):
        terms = StoreContractTerms.from_record({'panel_fee': 25000, 'base_fee': 1})
        self.assertEqual(terms.panel_fee, 25000)

    def test_zero_alias_is_kept(self):
        self.assertTrue(StoreContractTerms.from_record({'base_fee': 0}).is_panel_fee_waived)

    def test_custom_defaults(self):
        terms = StoreContractTerms.from_record({'panel_fee': 10000}, {'guarantee_count': 5})
        self.assertEqual(terms.panel_fee, 10000)
        self.assertEqual(terms.guarantee_count, 5)
        self.assertEqual(terms.charge_per_person, 3000)

    def test_invalid_record_values(self):
        for record in [{'panel_fee': -100}, {'guarantee_count': 'many'}, {'charge_per_person': 2999.5}]:
            with self.subTest(record=record):
                with self.assertRaises(ValidationError):
                    StoreContractTerms.from_record(record)


class TestVisitRecord(unittest.TestCase):
    """案内記録のテスト"""

    def test_from_record(self):
        record = VisitRecord.from_record({
            'id': 101,
            'store_id': 'raize',
            'guest_count': 2,
            'staff_name': 'Aoi',
            'guided_at': '2025-07-30T16:00:00.000Z',
            'staff_type': 'outstaff'
        })
        self.assertEqual(record.record_id, '101')
        self.assertEqual(record.guided_at, datetime(2025, 7, 30, 16, tzinfo=timezone.utc))
        self.assertEqual(record.staff_type, 'outstaff')

    def test_guided_at_falls_back_to_visited_at_then_created_at(self):
        visited = VisitRecord.from_record({
            'store_id': 'raize', 'guest_count': 1,
            'guided_at': None, 'visited_at': '2025-07-01T00:00:00Z', 'created_at': '2025-07-02T00:00:00Z'
        })
        self.assertEqual(visited.guided_at, datetime(2025, 7, 1, tzinfo=timezone.utc))

        created = VisitRecord.from_record({
            'store_id': 'raize', 'guest_count': 1, 'created_at': '2025-07-02T00:00:00Z'
        })
        self.assertEqual(created.guided_at, datetime(2025, 7, 2, tzinfo=timezone.utc))

    def test_offset_timestamps_are_normalized_to_utc(self):
        jst = timezone(timedelta(hours=9))
        record = VisitRecord('raize', 1, 'Aoi', datetime(2025, 7, 31, 1, tzinfo=jst))
        self.assertEqual(record.guided_at, datetime(2025, 7, 30, 16, tzinfo=timezone.utc))

    def test_missing_values_use_defaults(self):
        record = VisitRecord.from_record({
            'store_id': 'raize', 'guest_count': 3.0, 'staff_name': float('nan'),
            'guided_at': '2025-07-01T00:00:00Z', 'staff_type': ''
        })
        self.assertEqual(record.guest_count, 3)
        self.assertEqual(record.staff_name, '')
        self.assertEqual(record.staff_type, 'staff')
        self.assertIsNone(record.record_id)

    def test_invalid_records(self):
        base = {'store_id': 'raize', 'guest_count': 1, 'guided_at': '2025-07-01T00:00:00Z'}
        for overrides in [{'store_id': None}, {'guest_count': None}, {'guest_count': 0},
                          {'guest_count': -2}, {'staff_type': 'manager'}, {'guided_at': None}]:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationError):
                    VisitRecord.from_record({**base, **overrides})

    def test_naive_timestamp_is_rejected(self):
        with self.assertRaises(InvalidDateError):
            VisitRecord.from_record({'store_id': 'raize', 'guest_count': 1, 'guided_at': '2025-07-01T00:00:00'})


if __name__ == '__main__':
    unittest.main()

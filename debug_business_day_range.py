#!/usr/bin/env python3
"""
営業日範囲のデバッグ

指定日の営業日範囲（1:00切り替え）と暦月範囲をUTCで表示し、
ホストのローカルタイムゾーンで境界を組み立てた場合のずれを確認する。

使用方法:
    python debug_business_day_range.py 2025-07-31
    python debug_business_day_range.py 2025-07-31 --record 2025-07-30T15:59:59.999Z
"""

import sys
import argparse
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from common.error_handling.exceptions import GuideBillingError, InvalidDateError
from guide_billing.business_date import BusinessDateResolver, format_utc_instant, parse_local_date


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="営業日範囲のデバッグ")
    parser.add_argument('date', help='対象日（YYYY-MM-DD）')
    parser.add_argument('--record', action='append', default=[], help='判定したい案内日時（ISO形式、複数可）')
    parser.add_argument('--offset', type=int, default=9, help='UTCオフセット（時間）')
    args = parser.parse_args(argv)

    try:
        resolver = BusinessDateResolver(args.offset)
        target = parse_local_date(args.date)
        day_range = resolver.resolve_day_range(target)
        month_range = resolver.resolve_month_range(target.year, target.month)
    except GuideBillingError as e:
        print(f"❌ {e}")
        return 1

    print(f"\n🔍 営業日 {resolver.format_business_day_label(target)}")
    print(f"  start: {format_utc_instant(day_range.start)}")
    print(f"  end  : {format_utc_instant(day_range.end)}  (含まない)")

    print(f"\n🔍 暦月 {target.year}年{target.month}月")
    print(f"  start: {format_utc_instant(month_range.start)}")
    print(f"  end  : {format_utc_instant(month_range.end)}  (含まない)")

    # ホストのローカルタイムゾーンで組み立てた場合
    naive_start = datetime(target.year, target.month, target.day, resolver.business_day_start_hour).astimezone()
    print(f"\n⚠️ ホストローカルでの組み立て: {format_utc_instant(naive_start)}")
    if naive_start != day_range.start:
        drift = (naive_start - day_range.start).total_seconds() / 3600
        print(f"❌ {drift:+.0f}時間ずれています（ホストTZ: {naive_start.tzname()}）")
    else:
        print("✅ このホストではずれはありません")

    for record in args.record:
        try:
            included = day_range.contains(record)
            business_date = resolver.business_date_of(record)
        except InvalidDateError as e:
            print(f"❌ {record}: {e}")
            continue
        mark = "✅ 含む" if included else "❌ 含まない"
        print(f"\n{mark}: {record} -> 営業日 {resolver.format_business_day_label(business_date)}"
              f" / 表示日 {resolver.local_date_key_of(record)}")

    return 0


if __name__ == '__main__':
    sys.exit(main())

#!/usr/bin/env python3
"""
月次請求書生成 メイン実行スクリプト

使用方法:
    python run_monthly_billing.py 2025 8 --visits visit_records.csv --stores stores.csv
    python run_monthly_billing.py 2025 8 --visits visit_records.csv --stores stores.csv --store raize
    python run_monthly_billing.py 2025 8 --visits visit_records.csv --stores stores.csv --no-statements
"""

import sys
import argparse
from pathlib import Path

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent))

from common.config.config_manager import ConfigManager
from common.error_handling.exceptions import GuideBillingError
from guide_billing.main_controller import BillingController


def parse_arguments(argv=None):
    """コマンドライン引数を解析"""
    parser = argparse.ArgumentParser(
        description="店舗別 月次請求書生成システム",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用例:
  %(prog)s 2025 8 --visits visits.csv --stores stores.csv            # 2025年8月発行分（7月紹介料 + 9月掲載料金）
  %(prog)s 2025 8 --visits visits.csv --stores stores.csv --store raize  # 特定店舗のみ
  %(prog)s 2025 8 --visits visits.csv --stores stores.csv --no-statements  # サマリーのみ出力
  %(prog)s 2025 8 --visits visits.csv --stores stores.csv --log-level DEBUG
        """
    )

    parser.add_argument('year', type=int, help='請求年（例: 2025）')
    parser.add_argument('month', type=int, help='請求月（例: 8）')
    parser.add_argument('--visits', type=Path, required=True, help='案内記録エクスポートCSV')
    parser.add_argument('--stores', type=Path, required=True, help='店舗エクスポートCSV')
    parser.add_argument('--output', type=Path, help='出力ディレクトリ（省略時は設定ファイルのoutput_dir）')
    parser.add_argument('--store', action='append', dest='stores_filter', help='対象店舗ID（複数指定可）')
    parser.add_argument('--config', type=Path, help='設定ファイル（JSON）')
    parser.add_argument('--no-statements', action='store_true', help='店舗別の請求書Excelを出力しない')
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='ログレベル'
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """メイン関数"""
    args = parse_arguments(argv)

    try:
        config = ConfigManager(args.config)
        controller = BillingController(config, args.log_level)
        summary = controller.run(
            args.year,
            args.month,
            visits_csv=args.visits,
            stores_csv=args.stores,
            output_dir=args.output,
            store_ids=args.stores_filter,
            write_statements=not args.no_statements
        )
    except GuideBillingError as e:
        print(f"エラー: {e}", file=sys.stderr)
        return 1

    print(f"処理店舗数: {summary.total_stores} (成功 {summary.successful_stores} / 失敗 {summary.failed_stores})")
    print(f"請求総額（税込）: ¥{summary.total_billed:,}")

    return 0 if summary.failed_stores == 0 else 2


if __name__ == '__main__':
    sys.exit(main())

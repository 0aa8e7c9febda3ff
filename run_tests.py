#!/usr/bin/env python3
"""
テスト実行スクリプト

使用方法:
    python run_tests.py                         # すべてのテスト
    python run_tests.py test_invoice_calculator  # 特定のテストモジュール
"""
import unittest
import sys
from pathlib import Path
import time

# プロジェクトルートをパスに追加
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


def _last_line(traceback_text):
    lines = traceback_text.strip().splitlines() if traceback_text else []
    return lines[-1] if lines else 'Unknown error'


def run_all_tests():
    """すべてのテストを実行"""
    print("=" * 60)
    print("案内請求システム テスト実行")
    print("=" * 60)

    start_time = time.time()

    # テストディスカバリー
    loader = unittest.TestLoader()
    start_dir = project_root / 'tests'
    suite = loader.discover(str(start_dir), pattern='test_*.py')

    runner = unittest.TextTestRunner(
        verbosity=2,
        stream=sys.stdout,
        buffer=True
    )

    print(f"\nテスト実行開始: {time.strftime('%Y-%m-%d %H:%M:%S')}")
    print("-" * 60)

    result = runner.run(suite)

    duration = time.time() - start_time

    # 結果サマリー
    print("-" * 60)
    print("テスト結果サマリー:")
    print(f"実行時間: {duration:.2f}秒")
    print(f"実行テスト数: {result.testsRun}")
    print(f"成功: {result.testsRun - len(result.failures) - len(result.errors)}")
    print(f"失敗: {len(result.failures)}")
    print(f"エラー: {len(result.errors)}")

    if result.failures:
        print("\n失敗したテスト:")
        for test, traceback_text in result.failures:
            print(f"  - {test}: {_last_line(traceback_text)}")

    if result.errors:
        print("\nエラーが発生したテスト:")
        for test, traceback_text in result.errors:
            print(f"  - {test}: {_last_line(traceback_text)}")

    if result.failures or result.errors:
        print("\n⚠️  テストに失敗またはエラーがあります")
        return 1

    print("\n✅ すべてのテストが成功しました")
    return 0


def run_specific_test(test_name):
    """特定のテストモジュールを実行"""
    print(f"テスト実行: {test_name}")

    try:
        suite = unittest.TestLoader().loadTestsFromName(f'tests.{test_name}')
    except (ImportError, AttributeError) as e:
        print(f"テストモジュールが見つかりません: {test_name}")
        print(f"エラー: {e}")
        return 1

    result = unittest.TextTestRunner(verbosity=2).run(suite)
    return 0 if not (result.failures or result.errors) else 1


def main():
    """メイン関数"""
    if len(sys.argv) > 1:
        return run_specific_test(sys.argv[1])
    return run_all_tests()


if __name__ == '__main__':
    sys.exit(main())

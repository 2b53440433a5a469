"""
ロギング設定の一元管理モジュール

このモジュールでアプリケーション全体のロギング設定を行います。
各モジュールではget_logger()を呼び出してロガーインスタンスを取得してください。
"""

import logging
import os
import sys
import time

LOG_LEVEL_ENV = "TAFL_LOG"

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] (%(name)s): %(message)s"
SYSTEMD_FORMAT = "[%(levelname)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def level_from_env(default=logging.INFO):
    """環境変数 TAFL_LOG からログレベルを決定

    Args:
        default: 環境変数が無い、または解釈できない場合のレベル

    Returns:
        int: loggingのレベル値
    """
    value = os.environ.get(LOG_LEVEL_ENV)
    if not value:
        return default

    level = logging.getLevelName(value.strip().upper())
    if isinstance(level, int):
        return level
    return default


def setup_logger(log_level=None, systemd=False, stream=None):
    """
    アプリケーション全体のロギング設定を初期化

    Args:
        log_level: ログレベル (Noneの場合は環境変数 TAFL_LOG、無ければ INFO)
        systemd: Trueの場合はjournald向けにタイムスタンプを省いた形式で出力
        stream: 出力先 (デフォルト: sys.stdout)

    Note:
        この関数は通常、アプリケーションのエントリーポイントで一度だけ呼び出します。
    """
    if log_level is None:
        log_level = level_from_env()

    # ルートロガーの取得
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # 既存のハンドラをクリア（重複を防ぐ）
    root_logger.handlers.clear()

    # フォーマッタの作成 (時刻はUTCで出力)
    if systemd:
        formatter = logging.Formatter(SYSTEMD_FORMAT)
    else:
        formatter = logging.Formatter(DEFAULT_FORMAT, datefmt=DATE_FORMAT)
        formatter.converter = time.gmtime

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def get_logger(name):
    """
    指定された名前のロガーインスタンスを取得

    Args:
        name: ロガー名（通常は __name__ を指定）

    Returns:
        logging.Logger: ロガーインスタンス

    Example:
        >>> from tafl_client.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Hello, World!")
    """
    return logging.getLogger(name)

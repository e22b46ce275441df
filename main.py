"""
manaba の課題一覧を取得し、締切が近い課題を LINE Notify に送信する。
cron やタスクスケジューラから定期的に 1 回ずつ実行する想定。
"""
import argparse
import logging
import sys
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Iterator, Optional, Sequence

from config import Settings, alert_channel, load_settings, threshold_from_hours
from deadline import JST, filter_due_soon
from error_reporter import report_failure
from errors import PipelineError
from line_sender import format_kadai_message, send_init_alert, send_message
from manaba_scraper import fetch_kadai_page, iter_kadai_rows, login, new_session

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


@contextmanager
def step(name: str) -> Iterator[None]:
    """手順内の例外に手順名を付けて PipelineError にする。"""
    try:
        yield
    except Exception as e:
        raise PipelineError(name, e) from e


def run(settings: Settings, now: Optional[datetime] = None) -> None:
    """
    ログイン → 一覧取得 → 行の抽出と締切での絞り込み → 送信。
    どこかで失敗した時点で PipelineError を送出し、以降の手順は行わない。
    """
    if now is None:
        now = datetime.now(JST)

    with step("login"):
        session = new_session()
        login(session, settings)

    with step("fetch"):
        html = fetch_kadai_page(session, settings)

    with step("extract"):
        rows = iter_kadai_rows(html, settings.kadai_list_url)
        kadais = list(filter_due_soon(rows, settings.threshold, now))
    logger.info("締切 %s 以内の課題数: %d", settings.threshold, len(kadais))

    with step("notify"):
        message = format_kadai_message(kadais, settings.kadai_list_url)
        send_message(message, settings.token, settings)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="manaba の締切が近い課題を LINE Notify に送信します")
    parser.add_argument("--dry-run", action="store_true", help="送信せずにメッセージをログに出す")
    parser.add_argument("--threshold-hours", type=float, default=None,
                        help="何時間以内の締切を通知するか（既定: KADAI_THRESHOLD_HOURS または 48）")
    return parser.parse_args(argv)


def _build_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    if args.dry_run:
        settings = replace(settings, dry_run=True)
    if args.threshold_hours is not None:
        settings = replace(settings, threshold=threshold_from_hours(args.threshold_hours, "--threshold-hours"))
    return settings


def main(argv: Optional[Sequence[str]] = None) -> int:
    """0: 成功, 1: エラー（警告と err.log への記録は済み）"""
    _configure_logging()
    args = _parse_args(argv)

    try:
        settings = _build_settings(args)
    except Exception:
        token, notify_url = alert_channel()
        if token:
            send_init_alert(token, notify_url)
        raise

    logger.info("課題通知を開始（%s 以内の締切）", settings.threshold)
    try:
        run(settings)
    except PipelineError as e:
        report_failure(e, settings)
        return 1
    logger.info("完了")
    return 0


if __name__ == "__main__":
    sys.exit(main())

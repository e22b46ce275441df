"""
失敗時の通知と err.log への記録。
"""
import logging

from config import Settings
from errors import LoggingError, NotifyError
from line_sender import ALERT_MESSAGE, send_message

logger = logging.getLogger(__name__)

# err.log 専用。標準エラーのログには流さない
err_log = logging.getLogger("notify_kadai.err_log")
err_log.propagate = False
err_log.setLevel(logging.INFO)

ERR_LOG_FORMAT = "%(asctime)s %(message)s"


def report_failure(error: Exception, settings: Settings) -> None:
    """
    エラー用トークンで警告を送り、err.log に start / 送信エラー / 原因 / end を追記する。
    警告の送信に失敗しても記録するだけで、例外は送出しない。
    Raises:
        LoggingError: err.log を開けない場合。
    """
    logger.error("処理に失敗しました: %s", error)
    try:
        handler = logging.FileHandler(settings.err_log_path, mode="a", encoding="utf-8")
    except OSError as e:
        raise LoggingError(f"{settings.err_log_path} を開けません: {e}") from e
    handler.setFormatter(logging.Formatter(ERR_LOG_FORMAT))
    err_log.addHandler(handler)
    try:
        err_log.info("start")
        try:
            send_message(ALERT_MESSAGE, settings.error_token, settings)
        except NotifyError as e:
            logger.error("警告の送信に失敗しました: %s", e)
            err_log.info("%s", e)
        err_log.info("%s", error)
        err_log.info("end\n")
    finally:
        err_log.removeHandler(handler)
        handler.close()

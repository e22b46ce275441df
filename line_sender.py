"""
LINE Notify でメッセージを送信する。
"""
import logging
from typing import Optional, Sequence

import requests

from config import Settings
from errors import NotifyError
from models import Kadai

logger = logging.getLogger(__name__)

# LINE Notify のメッセージは最大 1000 文字
MAX_TEXT_LENGTH = 1000

NO_KADAI_MESSAGE = "直近の課題はありません"
HEADER_MESSAGE = "期限が迫っている課題があります"
ALERT_MESSAGE = "notifyKadaiに重大エラーが発生しました。"
INIT_ALERT_MESSAGE = "notifyKadaiに重大なエラーが発生しました"


def format_kadai_message(kadais: Sequence[Kadai], list_url: str) -> str:
    """課題リストを LINE 用の通知文に整形する。先頭の空行は送信者名の後で改行するため。"""
    if not kadais:
        return "\n".join(["", NO_KADAI_MESSAGE])

    lines = ["", HEADER_MESSAGE, ""]
    for k in kadais:
        lines.append(k.format_for_line())
        lines.append("")
    lines.append(list_url)
    return "\n".join(lines)


def split_message(text: str, limit: int = MAX_TEXT_LENGTH) -> list[str]:
    """
    limit を超える文を行単位で分割する。空行も含め "\\n".join(chunks) で元に戻る。
    1 行が長すぎる場合はその行を切る。
    """
    if len(text) <= limit:
        return [text]
    chunks: list[str] = []
    current: list[str] = []
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append("\n".join(current))
                current = []
            chunks.append(line[:limit])
            line = line[limit:]
        if current and len("\n".join(current)) + 1 + len(line) > limit:
            chunks.append("\n".join(current))
            current = []
        current.append(line)
    if current:
        chunks.append("\n".join(current))
    return chunks


def _post(text: str, token: str, notify_url: str, timeout: Optional[float]) -> None:
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/x-www-form-urlencoded",
    }
    try:
        r = requests.post(
            notify_url,
            data={"message": text},
            headers=headers,
            timeout=timeout,
        )
    except (requests.RequestException, UnicodeEncodeError) as e:
        # トークンに latin-1 以外の文字があるとヘッダーを作れず UnicodeEncodeError になる
        raise NotifyError(f"LINE 送信に失敗: {e}") from e
    if r.status_code != 200:
        raise NotifyError(f"status code is not 200 but {r.status_code}")


def send_message(text: str, token: str, settings: Settings) -> None:
    """
    text を LINE Notify に送信する。長い場合は分割して順に送る。
    Raises:
        NotifyError: 通信エラー、または status code が 200 以外の場合。
    """
    if settings.dry_run:
        logger.info("[dry-run] 送信せずに表示します:\n%s", text)
        return
    chunks = split_message(text)
    for chunk in chunks:
        _post(chunk, token, settings.notify_url, settings.request_timeout)
    logger.info("LINE 送信完了 (%d 通)", len(chunks))


def send_init_alert(token: str, notify_url: str) -> None:
    """設定を読み込めなかったときの警告。Settings なしで送り、失敗してもログに残すだけ。"""
    try:
        _post(INIT_ALERT_MESSAGE, token, notify_url, None)
    except NotifyError as e:
        logger.error("警告の送信に失敗しました: %s", e)

"""
締切文字列の解釈と、締切が近い課題の抽出。
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator

from errors import ParseError
from models import Kadai, KadaiRow

logger = logging.getLogger(__name__)

# manaba の表示は日本時間
JST = timezone(timedelta(hours=9))

DEADLINE_FORMAT = "%Y-%m-%d %H:%M %z"
JST_SUFFIX = " +0900"


def parse_deadline(text: str) -> datetime:
    """
    "YYYY-MM-DD HH:MM"（日本時間）を aware datetime に変換する。
    Raises:
        ParseError: 形式が一致しない場合。
    """
    try:
        return datetime.strptime(text.strip() + JST_SUFFIX, DEADLINE_FORMAT)
    except ValueError as e:
        raise ParseError(f"締切を解釈できません: {text!r}") from e


def is_due_soon(deadline: datetime, now: datetime, threshold: timedelta) -> bool:
    """残り時間が threshold 未満なら True。締切を過ぎたもの（残りが負）も含む。"""
    return deadline - now < threshold


def filter_due_soon(rows: Iterable[KadaiRow], threshold: timedelta, now: datetime) -> Iterator[Kadai]:
    """
    締切が threshold 以内の課題だけを順に返す。
    解釈できない締切が 1 件でもあれば ParseError でその場で止まる。
    """
    for row in rows:
        deadline = parse_deadline(row.deadline_text)
        if is_due_soon(deadline, now, threshold):
            yield Kadai.from_row(row, deadline)
        else:
            logger.debug("締切まで余裕があるため除外: %s (%s)", row.title, row.deadline_text)

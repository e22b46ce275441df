"""
課題（kadai）のデータ構造。
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

DISPLAY_FORMAT = "%Y-%m-%d %H:%M"


@dataclass(frozen=True)
class KadaiRow:
    """課題一覧の表の 1 行。締切はまだ文字列のまま。"""

    title: str
    title_url: Optional[str]
    course: str
    course_url: Optional[str]
    deadline_text: str


@dataclass(frozen=True)
class Kadai:
    """締切を解釈済みの課題 1 件。deadline は UTC+9 の aware datetime。"""

    title: str
    title_url: Optional[str]
    course: str
    course_url: Optional[str]
    deadline: datetime

    @classmethod
    def from_row(cls, row: KadaiRow, deadline: datetime) -> "Kadai":
        return cls(
            title=row.title,
            title_url=row.title_url,
            course=row.course,
            course_url=row.course_url,
            deadline=deadline,
        )

    def format_for_line(self) -> str:
        """LINE 用の数行テキストに整形（課題名・(コース名)・締め切り）。"""
        lines = [
            self.title,
            f"({self.course})",
            f"締め切り:{self.deadline.strftime(DISPLAY_FORMAT)}",
        ]
        return "\n".join(lines)

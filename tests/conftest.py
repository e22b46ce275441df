from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import pytest

from config import Settings
from deadline import JST

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=JST)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        username="a12345",
        password="secret",
        token="main-token",
        error_token="err-token",
        manaba_url="https://manaba.example.ac.jp",
        notify_url="https://notify.example.com/api/notify",
        err_log_path=tmp_path / "err.log",
    )


def _row(title: str, course: str, deadline: Optional[str], n: int) -> str:
    period = deadline if deadline is not None else ""
    return (
        f'<tr class="row{n % 2}">'
        f'<td class="center"><img src="/icon.png"></td>'
        f'<td><a href="home_course_{n}_query_{n}">{title}</a></td>'
        f'<td><a href="home_course_{n}">{course}</a></td>'
        f'<td class="center td-period">2026-10-01 09:00</td>'
        f'<td class="center td-period">{period}</td>'
        f"</tr>"
    )


@pytest.fixture
def build_html() -> Callable[[list[tuple[str, str, Optional[str]]]], str]:
    """(課題名, コース名, 締切) の並びから manaba の課題一覧風 HTML を作る。"""

    def build(rows: list[tuple[str, str, Optional[str]]]) -> str:
        body = "".join(_row(t, c, d, i) for i, (t, c, d) in enumerate(rows))
        return (
            "<html><body><table class=\"stdlist\">"
            '<tr class="title"><th>種別</th><th>タイトル</th><th>コース</th>'
            "<th>受付開始日時</th><th>受付終了日時</th></tr>"
            f"{body}</table></body></html>"
        )

    return build

"""
manaba にログインし、課題一覧ページから課題の行を取り出す。
"""
import logging
from typing import Iterator, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from config import Settings
from errors import AuthenticationError, FetchError, ParseError
from models import KadaiRow

logger = logging.getLogger(__name__)

USER_FIELD = "userid"
PASSWORD_FIELD = "password"

# 見出し行（class="title"）以外の、class を持つ行が課題
ROW_SELECTOR = 'tr[class]:not([class="title"])'
DEADLINE_SELECTOR = "td.center.td-period"


def new_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({
        "User-Agent": "NotifyKadai/1.0 (Python)",
        "Accept": "text/html,application/xhtml+xml",
        "Accept-Language": "ja,en;q=0.9",
    })
    return s


def _find_login_form(soup: BeautifulSoup) -> Optional[Tag]:
    """パスワード入力欄を持つフォームを探す。"""
    for f in soup.find_all("form"):
        if f.find("input", attrs={"type": "password"}):
            return f
    return None


def login(session: requests.Session, settings: Settings) -> None:
    """
    manaba にログインする。成功すると session に認証クッキーが入る。
    Raises:
        AuthenticationError: ログインに失敗した場合。
    """
    # 段階1: ログインページ
    try:
        r = session.get(settings.login_url, timeout=settings.request_timeout)
    except requests.RequestException as e:
        raise AuthenticationError(f"ログインページに到達できませんでした: {e}") from e
    if r.status_code != 200:
        raise AuthenticationError(f"ログインページの status code が 200 ではありません: {r.status_code}")
    logger.info("[段階1] ログインページに到達しました (URL=%s)", r.url)

    form = _find_login_form(BeautifulSoup(r.text, "html.parser"))
    if form is None:
        raise AuthenticationError("ログインフォームが見つかりません")

    # 段階2: hidden をそのまま引き継ぎ、ID/パスワードを入れて送信
    payload = {}
    for inp in form.find_all("input"):
        name = inp.get("name")
        if name and inp.get("type") == "hidden":
            payload[name] = inp.get("value", "")
    payload[USER_FIELD] = settings.username
    payload[PASSWORD_FIELD] = settings.password

    action = form.get("action") or ""
    post_url = urljoin(r.url, action) if action else r.url
    logger.info("[段階2] ログインフォームを送信します (POST先=%s)", post_url)
    try:
        r2 = session.post(post_url, data=payload, timeout=settings.request_timeout, allow_redirects=True)
    except requests.RequestException as e:
        raise AuthenticationError(f"ログイン送信に失敗しました: {e}") from e
    if r2.status_code != 200:
        raise AuthenticationError(f"ログイン送信の status code が 200 ではありません: {r2.status_code}")

    # 段階3: 成否の判定
    if not session.cookies:
        raise AuthenticationError("ログイン後にセッションクッキーがありません")
    if _find_login_form(BeautifulSoup(r2.text, "html.parser")) is not None:
        raise AuthenticationError("ログインに失敗しました（ID/パスワードを確認してください）")
    logger.info("[段階3] ログインに成功しました")


def fetch_kadai_page(session: requests.Session, settings: Settings) -> str:
    """
    課題一覧ページの HTML を 1 回だけ取得する。
    Raises:
        FetchError: 通信エラー、または status code が 200 以外の場合。
    """
    url = settings.kadai_list_url
    try:
        r = session.get(url, timeout=settings.request_timeout)
    except requests.RequestException as e:
        raise FetchError(f"課題一覧ページの取得に失敗: {e}") from e
    if r.status_code != 200:
        raise FetchError(f"status code is not 200 but {r.status_code}")
    logger.info("課題一覧ページを取得しました (%d bytes)", len(r.content))
    return r.text


def _text_and_url(td: Tag, base_url: str) -> tuple[str, Optional[str]]:
    """セル内のリンクの文字列と href（絶対 URL）。リンクがなければセルの文字列と None。"""
    a = td.find("a")
    if a is None:
        return td.get_text(strip=True), None
    href = a.get("href")
    return a.get_text(strip=True), urljoin(base_url, href) if href else None


def iter_kadai_rows(html: str, base_url: str) -> Iterator[KadaiRow]:
    """
    課題一覧の HTML から課題の行を順に取り出す。
    締切が空の行（下書きなど）は読み飛ばす。
    Raises:
        ParseError: 締切があるのに課題名・コース名のセルが無い場合。
    """
    soup = BeautifulSoup(html, "html.parser")
    for tr in soup.select(ROW_SELECTOR):
        periods = tr.select(DEADLINE_SELECTOR)
        deadline_text = periods[-1].get_text(strip=True) if periods else ""
        if not deadline_text:
            continue

        tds = [td for td in tr.find_all("td") if not td.has_attr("class")]
        if not tds:
            raise ParseError(f"課題名・コース名のセルが見つかりません (締切={deadline_text})")
        title, title_url = _text_and_url(tds[0], base_url)
        course, course_url = _text_and_url(tds[-1], base_url)
        yield KadaiRow(
            title=title,
            title_url=title_url,
            course=course,
            course_url=course_url,
            deadline_text=deadline_text,
        )

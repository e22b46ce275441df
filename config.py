"""
設定の読み込み。環境変数または .env から取得し、Settings にまとめる。
"""
import math
import os
import sys
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from errors import ConfigError

# プログラムのあるディレクトリ（err.log・.env の置き場所）
PROJECT_ROOT = Path(__file__).resolve().parent

DEFAULT_MANABA_URL = "https://room.chuo-u.ac.jp"
DEFAULT_NOTIFY_URL = "https://notify-api.line.me/api/notify"
DEFAULT_THRESHOLD_HOURS = 48.0

LOGIN_PATH = "/ct/login"
KADAI_LIST_PATH = "/ct/home_library_query"


def program_dir() -> Path:
    """実行ファイル（PyInstaller 等で固めた場合）またはこのファイルのディレクトリ。"""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return PROJECT_ROOT


def _load_env() -> Optional[str]:
    """.env を読み込み、読み込んだパスを返す（見つからなければ None）。"""
    candidates: list[Path] = [
        program_dir() / ".env",
        Path.cwd().resolve() / ".env",
    ]
    for p in candidates:
        if p.is_file():
            load_dotenv(p, override=False)
            return str(p)
    return None


@dataclass(frozen=True)
class Settings:
    """1 回の実行で使う設定。起動時に 1 度だけ作り、各処理に渡す。"""

    username: str
    password: str
    token: str
    error_token: str
    manaba_url: str = DEFAULT_MANABA_URL
    notify_url: str = DEFAULT_NOTIFY_URL
    threshold: timedelta = timedelta(hours=DEFAULT_THRESHOLD_HOURS)
    err_log_path: Path = PROJECT_ROOT / "err.log"
    request_timeout: Optional[float] = None
    dry_run: bool = False

    @property
    def login_url(self) -> str:
        return self.manaba_url + LOGIN_PATH

    @property
    def kadai_list_url(self) -> str:
        return self.manaba_url + KADAI_LIST_PATH


def _get(environ: Mapping[str, str], key: str, default: str = "") -> str:
    return environ.get(key, default).strip()


def _get_float(environ: Mapping[str, str], key: str, default: Optional[float]) -> Optional[float]:
    raw = _get(environ, key)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{key} は数値で指定してください: {raw!r}") from e
    if not math.isfinite(value):
        raise ConfigError(f"{key} は有限の数値で指定してください: {raw!r}")
    return value


def threshold_from_hours(hours: float, source: str = "KADAI_THRESHOLD_HOURS") -> timedelta:
    """
    時間数を timedelta にする。
    Raises:
        ConfigError: nan・inf や timedelta で表せない大きさの場合。
    """
    if not math.isfinite(hours):
        raise ConfigError(f"{source} は有限の数値で指定してください: {hours!r}")
    try:
        return timedelta(hours=hours)
    except OverflowError as e:
        raise ConfigError(f"{source} が大きすぎます: {hours!r}") from e


def alert_channel(environ: Optional[Mapping[str, str]] = None) -> tuple[str, str]:
    """設定の読み込みに失敗したときの警告先（TOKEN_ERR, 通知 API の URL）。"""
    if environ is None:
        environ = os.environ
    return _get(environ, "TOKEN_ERR"), _get(environ, "NOTIFY_URL") or DEFAULT_NOTIFY_URL


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    環境変数から Settings を作る。
    environ を省略した場合は .env を読み込んだうえで os.environ を使う。
    Raises:
        ConfigError: 必須の値が未設定、または数値の形式が不正な場合。
    """
    if environ is None:
        _load_env()
        environ = os.environ

    missing = [k for k in ("MANABA_ID", "MANABA_PASS", "TOKEN_ERR") if not _get(environ, k)]
    if missing:
        raise ConfigError("環境変数が設定されていません: " + ", ".join(missing))

    error_token = _get(environ, "TOKEN_ERR")
    threshold_hours = _get_float(environ, "KADAI_THRESHOLD_HOURS", DEFAULT_THRESHOLD_HOURS)
    err_log = _get(environ, "KADAI_ERR_LOG")

    return Settings(
        username=_get(environ, "MANABA_ID"),
        password=_get(environ, "MANABA_PASS"),
        token=_get(environ, "TOKEN") or error_token,
        error_token=error_token,
        manaba_url=(_get(environ, "MANABA_URL") or DEFAULT_MANABA_URL).rstrip("/"),
        notify_url=_get(environ, "NOTIFY_URL") or DEFAULT_NOTIFY_URL,
        threshold=threshold_from_hours(threshold_hours),
        err_log_path=Path(err_log) if err_log else program_dir() / "err.log",
        request_timeout=_get_float(environ, "REQUEST_TIMEOUT", None),
    )

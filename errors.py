"""
例外の定義。各処理はここの例外だけを送出し、main が手順名を付けて包む。
"""


class KadaiError(Exception):
    """notify-kadai の例外の基底クラス。"""


class ConfigError(KadaiError):
    """設定（環境変数）が不足・不正。"""


class AuthenticationError(KadaiError):
    """manaba へのログインに失敗。"""


class FetchError(KadaiError):
    """課題一覧ページの取得に失敗。"""


class ParseError(KadaiError):
    """HTML の構造または締切の文字列を解釈できない。"""


class NotifyError(KadaiError):
    """通知 API への送信に失敗。"""


class LoggingError(KadaiError):
    """err.log を開けない・書けない。"""


class PipelineError(KadaiError):
    """どの手順で失敗したかを保持する。元の例外は cause と __cause__ に入る。"""

    def __init__(self, step: str, cause: Exception):
        super().__init__(f"{step}: {cause}")
        self.step = step
        self.cause = cause

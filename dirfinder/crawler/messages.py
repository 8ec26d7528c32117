# =============================================================================
# Dir Finder - メッセージ定義
# =============================================================================
# バックグラウンドのクロールセッションから UI 側へ送られるメッセージです。
#
#   - DirectoryDiscovered: 枝刈りされなかったディレクトリを1件発見
#   - SessionComplete: 全ルートの処理が終わったことを示す終端メッセージ
# =============================================================================

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class DirectoryDiscovered:
    """
    発見したディレクトリ1件を表すメッセージ

    Attributes:
        path: ディレクトリのフルパス（ルート文字列とエントリ名を連結したもの）
    """
    path: str


@dataclass(frozen=True)
class SessionComplete:
    """セッション終了を示す終端メッセージ（1セッションにつき1回だけ送信される）"""


Message = Union[DirectoryDiscovered, SessionComplete]

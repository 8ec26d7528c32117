# =============================================================================
# Dir Finder - 除外パターンマッチャー
# =============================================================================
# ディレクトリのフルパスに除外パターンが含まれるかを判定します。
#
# 判定ルール:
#   - 大文字小文字を区別する部分文字列検索（ワイルドカードなし）
#   - パスの区切り位置には固定しない（"git" は "digital" にもマッチする）
# =============================================================================

from dataclasses import dataclass
from typing import Iterable, Tuple


def should_prune(path: str, patterns: Iterable[str]) -> bool:
    """
    パスを枝刈りすべきかどうかを判定する

    いずれかのパターンがパス文字列のどこかに含まれていれば True を返します。
    副作用はなく、ファイルシステムにもアクセスしません。

    Args:
        path: 判定対象のフルパス
        patterns: 除外パターンのリスト

    Returns:
        bool: 枝刈りすべき場合は True
    """
    return any(pattern in path for pattern in patterns)


@dataclass(frozen=True)
class IgnoreSnapshot:
    """
    セッション開始時点の除外パターンの不変コピー

    セッション開始後に UI 側でパターンを編集しても、
    実行中のクロールには影響しません（次回のセッションから反映）。

    Attributes:
        patterns: 除外パターンのタプル
    """
    patterns: Tuple[str, ...] = ()

    @classmethod
    def take(cls, patterns: Iterable[str]) -> "IgnoreSnapshot":
        """現在のパターンリストからスナップショットを作成する"""
        return cls(patterns=tuple(patterns))

    def should_prune(self, path: str) -> bool:
        return should_prune(path, self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

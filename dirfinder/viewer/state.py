# =============================================================================
# Dir Finder - 画面状態とリデューサー
# =============================================================================
# UI が保持する状態と、それを更新する純粋関数群です。
# どの関数も引数の状態を変更せず、新しい状態を返します。
#
# 主な機能:
#   - クロール結果メッセージの適用（update）
#   - 再収集の開始（begin_refresh）
#   - 除外パターン・ルートパスの追加と削除
#   - 収集済みディレクトリの部分文字列検索
#   - クリップボード用テキストの生成
# =============================================================================

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from dirfinder.crawler.messages import DirectoryDiscovered, Message, SessionComplete


@dataclass(frozen=True)
class SearchResults:
    """
    検索結果

    Attributes:
        needle: 正規化済みの検索文字列（前後の空白除去・小文字化）
        matches: 検索文字列を含むディレクトリのパス
    """
    needle: str
    matches: Tuple[str, ...]


@dataclass(frozen=True)
class ViewerState:
    """
    UI 全体の状態

    Attributes:
        root_dirs: 巡回対象のルートパス
        ignore_patterns: 除外パターン（次回のクロールから反映）
        subdirs: 収集済みのディレクトリ
        search_results: 直近の検索結果（未検索または再収集後は None）
        indexing_in_progress: クロール実行中かどうか
    """
    root_dirs: Tuple[str, ...] = ()
    ignore_patterns: Tuple[str, ...] = ()
    subdirs: Tuple[str, ...] = ()
    search_results: Optional[SearchResults] = None
    indexing_in_progress: bool = False


def initial_state(root_dirs: Iterable[str], ignore_patterns: Iterable[str]) -> ViewerState:
    return ViewerState(root_dirs=tuple(root_dirs), ignore_patterns=tuple(ignore_patterns))


def update(state: ViewerState, message: Message) -> ViewerState:
    """
    メッセージ1件を状態に適用する

    Args:
        state: 現在の状態
        message: クロールセッションからのメッセージ

    Returns:
        ViewerState: 更新後の状態
    """
    if isinstance(message, DirectoryDiscovered):
        return replace(state, subdirs=state.subdirs + (message.path,))
    if isinstance(message, SessionComplete):
        return replace(state, indexing_in_progress=False)
    raise TypeError(f"unknown message: {message!r}")


def apply_messages(state: ViewerState, messages: Iterable[Message]) -> ViewerState:
    """
    ティックごとに取り出したメッセージをまとめて順番に適用する

    DirectoryDiscovered はまとめて追加し、大量の結果でもタプルの
    作り直しが1ティック1回で済むようにしています。
    """
    pending = []
    for message in messages:
        if isinstance(message, DirectoryDiscovered):
            pending.append(message.path)
            continue
        if pending:
            state = replace(state, subdirs=state.subdirs + tuple(pending))
            pending = []
        state = update(state, message)
    if pending:
        state = replace(state, subdirs=state.subdirs + tuple(pending))
    return state


def begin_refresh(state: ViewerState) -> ViewerState:
    """収集結果と検索結果をクリアし、実行中フラグを立てる"""
    return replace(state, subdirs=(), search_results=None, indexing_in_progress=True)


def add_ignore_pattern(state: ViewerState, raw: str) -> ViewerState:
    """
    除外パターンを追加する

    前後の空白は除去されます。空文字列は追加しません
    （空のパターンは全てのパスにマッチしてしまうため）。
    """
    pattern = raw.strip()
    if not pattern:
        return state
    return replace(state, ignore_patterns=state.ignore_patterns + (pattern,))


def remove_ignore_pattern(state: ViewerState, index: int) -> ViewerState:
    """指定位置の除外パターンを削除する（範囲外の場合は何もしない）"""
    return replace(state, ignore_patterns=_remove_at(state.ignore_patterns, index))


def add_root(state: ViewerState, raw: str) -> ViewerState:
    """ルートパスを追加する（パスの妥当性は検証しない）"""
    root = raw.strip()
    if not root:
        return state
    return replace(state, root_dirs=state.root_dirs + (root,))


def remove_root(state: ViewerState, index: int) -> ViewerState:
    return replace(state, root_dirs=_remove_at(state.root_dirs, index))


def run_search(state: ViewerState, text: str) -> ViewerState:
    """
    収集済みディレクトリを部分文字列で検索する

    検索文字列は前後の空白を除去して小文字化します。
    パス側は小文字化しないため、大文字を含むパスは小文字の部分にしか
    マッチしません。

    Args:
        state: 現在の状態
        text: 入力された検索文字列

    Returns:
        ViewerState: search_results を更新した状態
    """
    needle = text.strip().lower()
    matches = tuple(path for path in state.subdirs if needle in path)
    return replace(state, search_results=SearchResults(needle=needle, matches=matches))


def export_text(paths: Iterable[str]) -> str:
    """パスのリストを改行区切りのテキストにする（クリップボードへのコピー用）"""
    return "\n".join(paths)


def _remove_at(items: Tuple[str, ...], index: int) -> Tuple[str, ...]:
    if index < 0 or index >= len(items):
        return items
    return items[:index] + items[index + 1:]

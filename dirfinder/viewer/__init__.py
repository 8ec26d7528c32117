# =============================================================================
# Dir Finder - 画面パッケージ
# =============================================================================
# クロール結果を受け取って表示用の状態を管理するモジュール群
#
# モジュール構成:
#   - state.py: 画面状態と純粋なリデューサー
#   - controller.py: 状態の保持とティック処理
# =============================================================================

from dirfinder.viewer.controller import DirectoryIndexController
from dirfinder.viewer.state import SearchResults, ViewerState

__all__ = ["DirectoryIndexController", "SearchResults", "ViewerState"]

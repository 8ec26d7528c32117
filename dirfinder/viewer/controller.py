# =============================================================================
# Dir Finder - 画面コントローラー
# =============================================================================
# ViewerState を保持し、クロールセッションとの橋渡しを行います。
#
# 主な機能:
#   - 定期ティック（APScheduler）でのメッセージ取り込み
#   - 再収集の開始（実行中の場合は受け付けない）
#   - 除外パターン・ルートパスの編集
#   - 検索とテキストエクスポート
# =============================================================================

import logging
import threading
from typing import Iterable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from dirfinder.crawler.session import CrawlSessionHandle
from dirfinder.viewer import state as viewer_state
from dirfinder.viewer.state import ViewerState

logger = logging.getLogger(__name__)


class DirectoryIndexController:
    """
    ディレクトリ一覧画面の状態を管理するコントローラー

    状態の更新は全て state モジュールの純粋関数で行い、
    このクラスは現在の状態の差し替えとスレッド間の排他だけを担当します。

    使用例:
        controller = DirectoryIndexController(
            root_dirs=["/home/user/repos"],
            ignore_patterns=[".git"],
            tick_interval_ms=100
        )
        controller.start()    # ティックを開始
        controller.refresh()  # ディレクトリの再収集
        controller.stop()     # 停止

    Attributes:
        tick_interval_ms: メッセージを取り込む間隔（ミリ秒）
    """

    def __init__(
        self,
        root_dirs: Iterable[str],
        ignore_patterns: Iterable[str] = None,
        tick_interval_ms: int = 100
    ):
        """
        DirectoryIndexController を初期化する

        Args:
            root_dirs: 巡回対象のルートパス
            ignore_patterns: 除外パターン
            tick_interval_ms: メッセージを取り込む間隔（ミリ秒）
        """
        self.tick_interval_ms = tick_interval_ms

        self._state = viewer_state.initial_state(root_dirs, ignore_patterns or [])
        self._lock = threading.Lock()
        self._sessions = CrawlSessionHandle()
        self._scheduler = BackgroundScheduler()

    def start(self) -> None:
        """ティックジョブを登録してスケジューラーを開始する"""
        self._scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self.tick_interval_ms / 1000),
            id='tick_job',
            name='Crawl Message Poller',
            replace_existing=True,
            coalesce=True,
            max_instances=1
        )
        self._scheduler.start()
        logger.info(f"ティックを開始しました（間隔: {self.tick_interval_ms}ミリ秒）")

    def stop(self) -> None:
        """
        スケジューラーを停止し、セッションハンドルを閉じる

        実行中のクロールは現在のルートで中断されます。
        """
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._sessions.shutdown()
        logger.info("コントローラーを停止しました")

    def tick(self) -> ViewerState:
        """
        バッファ済みのメッセージを取り込む（待機しない）

        取り出しと適用を同じロック内で行い、ティックが重なっても
        メッセージの順序が入れ替わらないようにしています。

        Returns:
            ViewerState: 取り込み後の状態
        """
        with self._lock:
            messages = self._sessions.poll()
            if messages:
                self._state = viewer_state.apply_messages(self._state, messages)
                if not self._state.indexing_in_progress:
                    logger.info(f"ディレクトリ収集完了: {len(self._state.subdirs)} 件")
            return self._state

    def refresh(self) -> bool:
        """
        ディレクトリの再収集を開始する

        既にクロールが実行中の場合は False を返します。
        状態の更新はセッションを開始できた後に行います。

        Returns:
            bool: 開始できた場合は True

        Raises:
            HandleClosedError: stop() 済みの場合
        """
        with self._lock:
            if self._state.indexing_in_progress:
                logger.warning("ディレクトリ収集は既に実行中です")
                return False
            root_dirs = self._state.root_dirs
            ignore_patterns = self._state.ignore_patterns

            self._sessions.start(root_dirs, ignore_patterns)
            self._state = viewer_state.begin_refresh(self._state)

        logger.info(f"ディレクトリ収集を開始しました: {list(root_dirs)}")
        return True

    def add_ignore_pattern(self, raw: str) -> bool:
        with self._lock:
            before = self._state
            self._state = viewer_state.add_ignore_pattern(self._state, raw)
            return self._state is not before

    def remove_ignore_pattern(self, index: int) -> bool:
        with self._lock:
            if not 0 <= index < len(self._state.ignore_patterns):
                return False
            self._state = viewer_state.remove_ignore_pattern(self._state, index)
            return True

    def add_root(self, raw: str) -> bool:
        with self._lock:
            before = self._state
            self._state = viewer_state.add_root(self._state, raw)
            return self._state is not before

    def remove_root(self, index: int) -> bool:
        with self._lock:
            if not 0 <= index < len(self._state.root_dirs):
                return False
            self._state = viewer_state.remove_root(self._state, index)
            return True

    def search(self, text: str) -> viewer_state.SearchResults:
        """
        収集済みディレクトリを検索する

        Args:
            text: 検索文字列

        Returns:
            SearchResults: 検索結果
        """
        with self._lock:
            self._state = viewer_state.run_search(self._state, text)
            return self._state.search_results

    def get_state(self) -> ViewerState:
        with self._lock:
            return self._state

    def wait_for_sessions(self, timeout: float = None) -> bool:
        """開始済みのクロールセッションの終了を待つ（主にテスト用）"""
        return self._sessions.wait(timeout)

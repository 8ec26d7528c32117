# =============================================================================
# Dir Finder - クロールセッション
# =============================================================================
# 複数のルートパスを順番に巡回し、結果をチャネルへ流すセッションです。
#
# 主な機能:
#   - ルートを指定順に1つずつ巡回（並列実行はしない）
#   - 全ルート終了後に終端メッセージを必ず1回送信
#   - バックグラウンドスレッドでの実行（呼び出し側はブロックしない）
#   - 受信側を閉じることによる暗黙のキャンセル
# =============================================================================

import logging
import threading
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from dirfinder.crawler.channel import ChannelClosed, Sender, open_channel
from dirfinder.crawler.matcher import IgnoreSnapshot
from dirfinder.crawler.messages import Message, SessionComplete
from dirfinder.crawler.walker import DirectoryWalker

logger = logging.getLogger(__name__)


class HandleClosedError(RuntimeError):
    """shutdown() 済みのセッションハンドルで start() を呼んだ場合の例外"""


def run_session(
    root_dirs: Sequence[str],
    ignore_snapshot: IgnoreSnapshot,
    sender: Sender
) -> None:
    """
    全てのルートを順番に巡回し、最後に SessionComplete を送信する

    受信側が閉じられた場合は現在のルートだけが中断され、後続のルートは
    そのまま開始されます（最初の送信で中断する）。あるルートで想定外の
    例外が発生しても、セッション全体は中断せず次のルートへ進みます。

    Args:
        root_dirs: 巡回するルートパスのリスト（重複・包含関係も許容）
        ignore_snapshot: 全ルートで共有する除外パターン
        sender: 全ルートで共有する送信先
    """
    logger.info("=" * 60)
    logger.info(f"クロールセッションを開始します（ルート数: {len(root_dirs)}）")
    logger.info("=" * 60)

    start_time = datetime.now()
    walker = DirectoryWalker(ignore_snapshot)

    try:
        for root_path in root_dirs:
            try:
                walker.stream(root_path, sender)
            except Exception as e:
                logger.error(f"ルートの巡回に失敗: {root_path} - {e}", exc_info=True)
    finally:
        try:
            sender.send(SessionComplete())
        except ChannelClosed:
            logger.debug("受信側が閉じられているため終了通知は破棄されました")

        elapsed = datetime.now() - start_time
        logger.info("=" * 60)
        logger.info(f"クロールセッション完了（所要時間: {elapsed}）")
        logger.info("=" * 60)


class CrawlSessionHandle:
    """
    クロールセッションを起動し、結果を受け取るためのハンドル

    呼び出し側（UI）が所有し、1つのチャネルを複数のセッションで共有します。
    「同時に1セッションだけ」という制御は UI 側の責務で、このクラスは
    重複したセッションもそのまま実行します。

    使用例:
        handle = CrawlSessionHandle()
        handle.start(["/home/user/repos"], [".git"])
        for message in handle.poll():  # UI のティックごとに呼ぶ
            ...
        handle.shutdown()
    """

    def __init__(self):
        """チャネルを作成してハンドルを初期化する"""
        self._sender, self._receiver = open_channel()
        self._threads: List[threading.Thread] = []
        self._lock = threading.Lock()
        self._sessions_started = 0

    def start(self, root_dirs: Iterable[str], ignore_patterns: Iterable[str]) -> None:
        """
        バックグラウンドでセッションを開始する

        ルートリストと除外パターンはこの呼び出しの時点でコピーされるため、
        後から元のリストを編集しても実行中のセッションには影響しません。

        Args:
            root_dirs: 巡回するルートパスのリスト
            ignore_patterns: 除外パターンのリスト

        Raises:
            HandleClosedError: shutdown() 済みの場合
        """
        if self._receiver.closed:
            raise HandleClosedError("session handle has been shut down")

        roots = list(root_dirs)
        snapshot = IgnoreSnapshot.take(ignore_patterns)

        with self._lock:
            self._sessions_started += 1
            worker = threading.Thread(
                target=run_session,
                args=(roots, snapshot, self._sender),
                name=f"dirfinder-crawl-session-{self._sessions_started}",
                daemon=True,
            )
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(worker)

        worker.start()

    def poll(self) -> List[Message]:
        """
        バッファ済みのメッセージを待たずに全て取り出す

        Returns:
            list: 0件以上のメッセージ（送信順）
        """
        return self._receiver.drain()

    def shutdown(self) -> None:
        """
        受信側を閉じる

        実行中のセッションは現在のルートの巡回を中断し、残りのルートも
        最初の送信で中断して終了します。
        """
        self._receiver.close()
        logger.info("クロールセッションハンドルを停止しました")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        これまでに開始したセッションの終了を待つ

        Args:
            timeout: 各スレッドの待機時間（秒）、None の場合は無制限

        Returns:
            bool: 全てのセッションが終了していれば True
        """
        with self._lock:
            threads = list(self._threads)
        for worker in threads:
            worker.join(timeout)
        return not any(worker.is_alive() for worker in threads)

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return any(worker.is_alive() for worker in self._threads)

    @property
    def is_closed(self) -> bool:
        return self._receiver.closed

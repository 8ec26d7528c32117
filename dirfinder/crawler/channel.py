# =============================================================================
# Dir Finder - ストリームチャネル
# =============================================================================
# クロールセッション（送信側）と UI（受信側）の間でメッセージを受け渡す
# 上限なしの FIFO キューです。
#
# 特徴:
#   - 送信側は複数可、受信側は1つ
#   - 受信側はノンブロッキングで取り出す（待機しない）
#   - 受信側を閉じる（または破棄する）と、以降の送信は ChannelClosed になる
#   - ACK やバックプレッシャーはない
# =============================================================================

import logging
import queue
import threading
from typing import List, Optional, Tuple

from dirfinder.crawler.messages import Message

logger = logging.getLogger(__name__)


class ChannelClosed(Exception):
    """受信側が閉じられた後に送信しようとした場合に送出される例外"""


class _ChannelState:
    """送信側と受信側で共有する内部状態"""

    def __init__(self):
        self.queue: "queue.SimpleQueue[Message]" = queue.SimpleQueue()
        self.closed = threading.Event()


class Sender:
    """
    チャネルの送信側

    複数スレッドから同時に send() を呼び出しても安全です。
    """

    def __init__(self, state: _ChannelState):
        self._state = state

    def send(self, message: Message) -> None:
        """
        メッセージをキューに追加する

        Args:
            message: 送信するメッセージ

        Raises:
            ChannelClosed: 受信側が既に閉じられている場合
        """
        if self._state.closed.is_set():
            raise ChannelClosed("receiver has been closed")
        self._state.queue.put(message)

    @property
    def closed(self) -> bool:
        return self._state.closed.is_set()


class Receiver:
    """
    チャネルの受信側

    UI のティックごとに drain() を呼び出し、溜まっているメッセージを
    全て取り出して順番に適用することを想定しています。
    """

    def __init__(self, state: _ChannelState):
        self._state = state

    def try_recv(self) -> Optional[Message]:
        """
        次のメッセージを待たずに取り出す

        Returns:
            Message: 取り出したメッセージ、キューが空または閉じている場合は None
        """
        if self._state.closed.is_set():
            return None
        try:
            return self._state.queue.get_nowait()
        except queue.Empty:
            return None

    def drain(self) -> List[Message]:
        """
        現在バッファされているメッセージを全て取り出す

        Returns:
            list: 送信された順のメッセージリスト（0件の場合もある）
        """
        messages = []
        while True:
            message = self.try_recv()
            if message is None:
                break
            messages.append(message)
        return messages

    def close(self) -> None:
        """
        受信側を閉じる

        バッファに残っているメッセージは破棄されます。
        何度呼び出しても問題ありません。
        """
        if self._state.closed.is_set():
            return
        self._state.closed.set()
        # 残りのメッセージを破棄してメモリを解放
        while True:
            try:
                self._state.queue.get_nowait()
            except queue.Empty:
                break
        logger.debug("チャネルの受信側を閉じました")

    @property
    def closed(self) -> bool:
        return self._state.closed.is_set()

    def __del__(self):
        # 受信側の破棄 = キャンセル
        state = getattr(self, "_state", None)
        if state is not None:
            state.closed.set()


def open_channel() -> Tuple[Sender, Receiver]:
    """
    送信側と受信側のペアを作成する

    Returns:
        tuple: (Sender, Receiver)
    """
    state = _ChannelState()
    return Sender(state), Receiver(state)

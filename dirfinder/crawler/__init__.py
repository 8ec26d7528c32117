# =============================================================================
# Dir Finder - クローラーパッケージ
# =============================================================================
# ルートパス配下のディレクトリを巡回し、結果を UI へ流すモジュール群
#
# モジュール構成:
#   - matcher.py: 除外パターンの判定
#   - walker.py: 1つのルートの巡回
#   - session.py: 複数ルートのセッション管理
#   - channel.py: メッセージの受け渡し
#   - messages.py: メッセージ定義
# =============================================================================

from dirfinder.crawler.channel import ChannelClosed, Receiver, Sender, open_channel
from dirfinder.crawler.matcher import IgnoreSnapshot, should_prune
from dirfinder.crawler.messages import DirectoryDiscovered, Message, SessionComplete
from dirfinder.crawler.session import CrawlSessionHandle, HandleClosedError, run_session
from dirfinder.crawler.walker import DirectoryWalker

__all__ = [
    "ChannelClosed",
    "CrawlSessionHandle",
    "DirectoryDiscovered",
    "DirectoryWalker",
    "HandleClosedError",
    "IgnoreSnapshot",
    "Message",
    "Receiver",
    "SessionComplete",
    "Sender",
    "open_channel",
    "run_session",
    "should_prune",
]

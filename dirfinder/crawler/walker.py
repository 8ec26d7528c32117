# =============================================================================
# Dir Finder - ディレクトリウォーカー
# =============================================================================
# 1つのルートパス配下を深さ優先で巡回し、ディレクトリのパスを収集します。
#
# 主な機能:
#   - シンボリックリンクを追跡する深さ優先巡回（先行順）
#   - 除外パターンによるサブツリー全体の枝刈り（降りる前に判定）
#   - 祖先ディレクトリへ戻るリンクのループ検出
#   - エントリ単位のエラーはその場で握りつぶして巡回を継続
#   - 受信側が閉じられたら現在のルートの巡回を即座に中断
# =============================================================================

import logging
import os
from typing import Dict, Generator, List, Tuple

from dirfinder.crawler.channel import ChannelClosed, Sender
from dirfinder.crawler.matcher import IgnoreSnapshot
from dirfinder.crawler.messages import DirectoryDiscovered

logger = logging.getLogger(__name__)

# ディレクトリの同一性判定に使うキー (st_dev, st_ino)
DirKey = Tuple[int, int]


def _dir_key(path: str) -> DirKey:
    """リンクを解決した先のディレクトリを識別するキーを取得する"""
    stat = os.stat(path)
    return stat.st_dev, stat.st_ino


class DirectoryWalker:
    """
    ルートパス配下のディレクトリを列挙するクラス

    ファイルは報告しません。除外パターンに一致したディレクトリは、
    その子孫も含めて一切訪問・報告されません。

    使用例:
        walker = DirectoryWalker(IgnoreSnapshot.take([".git", "node_modules"]))
        for path in walker.walk("/home/user/repos"):
            print(path)

    Note:
        シンボリックリンクの先が現在のパス上の祖先ディレクトリと同じ場合は
        ループとみなしてスキップします。祖先でない重複（別々の枝から
        同じディレクトリへのリンク）はリンクごとに巡回されます。
    """

    def __init__(self, ignore_snapshot: IgnoreSnapshot):
        """
        DirectoryWalker を初期化する

        Args:
            ignore_snapshot: セッション開始時に取得した除外パターン
        """
        self.ignore_snapshot = ignore_snapshot
        self._stats = self._empty_stats()

    def walk(self, root_path: str) -> Generator[str, None, None]:
        """
        ルートパス配下のディレクトリを深さ優先で列挙する

        ルート自体も判定対象で、枝刈りされなければ最初の結果になります。
        同じ階層のディレクトリは名前順に巡回します。

        Args:
            root_path: 巡回を開始するディレクトリパス

        Yields:
            str: 見つかったディレクトリのパス
        """
        self._reset_stats()

        if not os.path.exists(root_path):
            logger.warning(f"ルートパスが存在しません: {root_path}")
            return

        if not os.path.isdir(root_path):
            logger.warning(f"ルートパスがディレクトリではありません: {root_path}")
            return

        if self.ignore_snapshot.should_prune(root_path):
            logger.info(f"ルートパスが除外パターンに一致しました: {root_path}")
            self._stats["pruned_by_pattern"] += 1
            return

        try:
            root_key = _dir_key(root_path)
        except OSError as e:
            logger.warning(f"ルートパスにアクセスできません: {root_path} - {e}")
            return

        logger.info(f"ディレクトリ収集開始: {root_path}")

        # 訪問待ちのディレクトリと、その祖先キー（自身を含む）
        # 深い階層でも再帰上限に達しないよう明示的なスタックで巡回する
        stack: List[Tuple[str, Tuple[DirKey, ...]]] = [(root_path, (root_key,))]

        while stack:
            dirpath, chain = stack.pop()

            try:
                dirnames = self._list_subdirs(dirpath)
            except OSError as e:
                logger.debug(f"ディレクトリ読み取りエラー: {dirpath} - {e}")
                self._stats["skipped_by_error"] += 1
                continue

            self._stats["directories_found"] += 1
            yield dirpath

            # 子ディレクトリは降りる前に枝刈りする
            pending = []
            for name in dirnames:
                child = os.path.join(dirpath, name)

                if self.ignore_snapshot.should_prune(child):
                    self._stats["pruned_by_pattern"] += 1
                    continue

                try:
                    key = _dir_key(child)
                except OSError as e:
                    logger.debug(f"ディレクトリ情報取得エラー: {child} - {e}")
                    self._stats["skipped_by_error"] += 1
                    continue

                if key in chain:
                    logger.debug(f"リンクのループを検出したためスキップします: {child}")
                    self._stats["skipped_by_loop"] += 1
                    continue

                pending.append((child, chain + (key,)))

            # 名前順に取り出されるよう逆順で積む
            stack.extend(reversed(pending))

        logger.info(f"ディレクトリ収集完了: {root_path}")
        logger.info(f"統計: {self._stats}")

    def stream(self, root_path: str, sender: Sender) -> bool:
        """
        見つかったディレクトリを1件ずつチャネルへ送信する

        送信に失敗した（受信側が閉じられた）場合は、このルートの巡回だけを
        即座に中断します。例外は呼び出し元に伝播しません。

        Args:
            root_path: 巡回を開始するディレクトリパス
            sender: メッセージの送信先

        Returns:
            bool: 最後まで巡回した場合は True、中断した場合は False
        """
        for path in self.walk(root_path):
            try:
                sender.send(DirectoryDiscovered(path))
            except ChannelClosed:
                logger.info(f"受信側が閉じられたため巡回を中断します: {root_path}")
                return False
        return True

    def _list_subdirs(self, dirpath: str) -> List[str]:
        """
        直下のディレクトリ名を名前順で取得する（リンク先も判定）

        種別を判定できないエントリはスキップします。

        Raises:
            OSError: ディレクトリ自体を読めない場合
        """
        names = []
        with os.scandir(dirpath) as entries:
            for entry in entries:
                try:
                    if entry.is_dir():
                        names.append(entry.name)
                except OSError as e:
                    logger.debug(f"エントリ種別の判定エラー: {entry.path} - {e}")
                    self._stats["skipped_by_error"] += 1
        return sorted(names)

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            "directories_found": 0,
            "pruned_by_pattern": 0,
            "skipped_by_loop": 0,
            "skipped_by_error": 0
        }

    def _reset_stats(self):
        """巡回統計情報をリセットする"""
        self._stats = self._empty_stats()

    def get_stats(self) -> Dict[str, int]:
        """
        直近の巡回の統計情報を取得する

        Returns:
            dict: 統計情報を含む辞書
        """
        return self._stats.copy()

# =============================================================================
# Dir Finder - FastAPI メインエントリーポイント
# =============================================================================
# アプリケーションの起動、ルーティング設定、コントローラーの
# 初期化を行うメインモジュールです。
#
# 起動方法:
#   uvicorn dirfinder.main:app --host 127.0.0.1 --port 8000
#   または dirfinder（コンソールスクリプト）
# =============================================================================

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from dirfinder.api.routes import router as api_router
from dirfinder.config import Settings, settings
from dirfinder.viewer.controller import DirectoryIndexController


# ---------------------------------------------------------------------------
# ログ設定
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=getattr(logging, settings.logging.level),
    format=settings.logging.format
)
logger = logging.getLogger(__name__)


def create_app(app_settings: Settings = None) -> FastAPI:
    """
    FastAPIアプリケーションを作成する

    Args:
        app_settings: 使用する設定（省略時はグローバル設定）

    Returns:
        FastAPI: アプリケーションインスタンス
    """
    app_settings = app_settings or settings

    # -----------------------------------------------------------------------
    # ライフサイクル管理
    # -----------------------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        FastAPIアプリケーションのライフサイクルを管理する

        起動時の処理:
        1. コントローラーの初期化
        2. ティックの開始

        終了時の処理:
        1. ティックの停止
        2. 実行中のクロールの中断（受信側を閉じる）

        Args:
            app: FastAPIアプリケーションインスタンス

        Yields:
            None: コンテキスト内でアプリケーションが実行される
        """
        logger.info("=" * 60)
        logger.info("Dir Finder を起動しています...")
        logger.info("=" * 60)

        controller = DirectoryIndexController(
            root_dirs=app_settings.root_dirs,
            ignore_patterns=app_settings.ignore_patterns,
            tick_interval_ms=app_settings.tick_interval_ms
        )
        controller.start()
        app.state.controller = controller
        app.state.search_limit = app_settings.search_limit

        logger.info(f"ルートパス: {app_settings.root_dirs}")
        logger.info(f"除外パターン: {app_settings.ignore_patterns}")
        logger.info("=" * 60)

        # アプリケーション実行中
        yield

        # シャットダウン処理
        logger.info("Dir Finder を終了しています...")
        controller.stop()
        app.state.controller = None
        logger.info("Dir Finder を終了しました")

    # -----------------------------------------------------------------------
    # FastAPIアプリケーションの作成
    # -----------------------------------------------------------------------
    app = FastAPI(
        title="Dir Finder",
        description="複数のルートパス配下のディレクトリを収集・検索するツール",
        version="1.0.0",
        lifespan=lifespan
    )

    # APIルーター（収集、検索、除外パターン編集など）を登録
    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


def run() -> None:
    """設定されたアドレスで HTTP サーバーを起動する"""
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower()
    )


if __name__ == "__main__":
    run()

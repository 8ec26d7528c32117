# =============================================================================
# Dir Finder - API ルート
# =============================================================================
# REST API エンドポイントを定義します。
#
# エンドポイント:
#   GET    /api/status                  - 画面状態の概要
#   POST   /api/refresh                 - ディレクトリの再収集
#   GET    /api/subdirs                 - 収集済みディレクトリ一覧
#   GET    /api/subdirs/text            - 収集済みディレクトリのテキスト出力
#   GET    /api/roots/text              - ルートパスのテキスト出力
#   GET    /api/search                  - 収集済みディレクトリの検索
#   GET    /api/search/text             - 直近の検索結果のテキスト出力
#   POST   /api/ignore-patterns         - 除外パターン追加
#   DELETE /api/ignore-patterns/{index} - 除外パターン削除
#   POST   /api/roots                   - ルートパス追加
#   DELETE /api/roots/{index}           - ルートパス削除
# =============================================================================

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from dirfinder.viewer import state as viewer_state
from dirfinder.viewer.controller import DirectoryIndexController

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ルーターの作成
# ---------------------------------------------------------------------------
router = APIRouter(tags=["API"])


# ---------------------------------------------------------------------------
# リクエスト・レスポンスモデル
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    """
    画面状態のレスポンスモデル

    Attributes:
        root_dirs: ルートパス一覧
        ignore_patterns: 除外パターン一覧
        subdir_count: 収集済みディレクトリ数
        indexing_in_progress: クロール実行中かどうか
    """
    root_dirs: List[str]
    ignore_patterns: List[str]
    subdir_count: int
    indexing_in_progress: bool


class SubdirsResponse(BaseModel):
    """
    収集済みディレクトリ一覧のレスポンスモデル

    Attributes:
        subdirs: ディレクトリのパス（offset から limit 件）
        total: 収集済みの総件数
        indexing_in_progress: クロール実行中かどうか
    """
    subdirs: List[str]
    total: int
    indexing_in_progress: bool


class SearchResponse(BaseModel):
    """
    検索結果のレスポンスモデル

    Attributes:
        needle: 正規化済みの検索文字列
        matches: マッチしたパス（search_limit 件まで）
        total_matches: マッチした総件数
    """
    needle: str
    matches: List[str]
    total_matches: int


class MessageResponse(BaseModel):
    """
    汎用メッセージレスポンスモデル

    Attributes:
        success: 成功したかどうか
        message: メッセージ
    """
    success: bool
    message: str


class IgnorePatternRequest(BaseModel):
    pattern: str


class RootRequest(BaseModel):
    path: str


def get_controller(request: Request) -> DirectoryIndexController:
    """アプリケーションに紐づくコントローラーを取得する"""
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        raise HTTPException(status_code=503, detail="コントローラーが初期化されていません")
    return controller


def _status_response(controller: DirectoryIndexController) -> StatusResponse:
    current = controller.get_state()
    return StatusResponse(
        root_dirs=list(current.root_dirs),
        ignore_patterns=list(current.ignore_patterns),
        subdir_count=len(current.subdirs),
        indexing_in_progress=current.indexing_in_progress
    )


# ---------------------------------------------------------------------------
# 状態 API
# ---------------------------------------------------------------------------
@router.get("/status", response_model=StatusResponse)
async def get_status(request: Request):
    """
    画面状態の概要を取得する

    Returns:
        StatusResponse: ルート、除外パターン、収集件数、実行中フラグ
    """
    return _status_response(get_controller(request))


# ---------------------------------------------------------------------------
# 収集 API
# ---------------------------------------------------------------------------
@router.post("/refresh", response_model=MessageResponse)
async def refresh(request: Request):
    """
    ディレクトリの再収集を開始する

    収集はバックグラウンドで行われ、結果はティックごとに取り込まれます。
    既に実行中の場合は 409 を返します。
    """
    controller = get_controller(request)
    if not controller.refresh():
        raise HTTPException(status_code=409, detail="ディレクトリ収集は既に実行中です")
    return MessageResponse(success=True, message="ディレクトリ収集を開始しました")


@router.get("/subdirs", response_model=SubdirsResponse)
async def list_subdirs(
    request: Request,
    offset: int = Query(0, ge=0, description="スキップ件数"),
    limit: int = Query(100, ge=1, le=10000, description="取得件数")
):
    """収集済みディレクトリを取得する（ページネーション対応）"""
    current = get_controller(request).get_state()
    return SubdirsResponse(
        subdirs=list(current.subdirs[offset:offset + limit]),
        total=len(current.subdirs),
        indexing_in_progress=current.indexing_in_progress
    )


@router.get("/subdirs/text", response_class=PlainTextResponse)
async def export_subdirs(request: Request):
    """収集済みディレクトリを改行区切りのテキストで返す"""
    current = get_controller(request).get_state()
    return viewer_state.export_text(current.subdirs)


@router.get("/roots/text", response_class=PlainTextResponse)
async def export_roots(request: Request):
    """ルートパスを改行区切りのテキストで返す"""
    current = get_controller(request).get_state()
    return viewer_state.export_text(current.root_dirs)


# ---------------------------------------------------------------------------
# 検索 API
# ---------------------------------------------------------------------------
@router.get("/search", response_model=SearchResponse)
async def search(
    request: Request,
    q: str = Query("", description="検索文字列")
):
    """
    収集済みディレクトリを部分文字列で検索する

    Args:
        q: 検索文字列（前後の空白除去・小文字化して使用）

    Returns:
        SearchResponse: 検索結果

    Example:
        GET /api/search?q=src
    """
    controller = get_controller(request)
    results = controller.search(q)
    limit = request.app.state.search_limit
    return SearchResponse(
        needle=results.needle,
        matches=list(results.matches[:limit]),
        total_matches=len(results.matches)
    )


@router.get("/search/text", response_class=PlainTextResponse)
async def export_search_results(request: Request):
    """
    直近の検索結果を改行区切りのテキストで返す

    件数の上限は適用しません。未検索または再収集後は空文字列を返します。
    """
    current = get_controller(request).get_state()
    if current.search_results is None:
        return ""
    return viewer_state.export_text(current.search_results.matches)


# ---------------------------------------------------------------------------
# 除外パターン API
# ---------------------------------------------------------------------------
@router.post("/ignore-patterns", response_model=StatusResponse)
async def add_ignore_pattern(request: Request, body: IgnorePatternRequest):
    """除外パターンを追加する（次回の収集から反映）"""
    controller = get_controller(request)
    if not controller.add_ignore_pattern(body.pattern):
        raise HTTPException(status_code=400, detail="除外パターンが空です")
    logger.info(f"除外パターンを追加しました: {body.pattern.strip()}")
    return _status_response(controller)


@router.delete("/ignore-patterns/{index}", response_model=StatusResponse)
async def remove_ignore_pattern(request: Request, index: int):
    """指定位置の除外パターンを削除する"""
    controller = get_controller(request)
    if not controller.remove_ignore_pattern(index):
        raise HTTPException(status_code=404, detail=f"除外パターンが見つかりません: {index}")
    return _status_response(controller)


# ---------------------------------------------------------------------------
# ルートパス API
# ---------------------------------------------------------------------------
@router.post("/roots", response_model=StatusResponse)
async def add_root(request: Request, body: RootRequest):
    """ルートパスを追加する（存在しないパスも受け付ける）"""
    controller = get_controller(request)
    if not controller.add_root(body.path):
        raise HTTPException(status_code=400, detail="ルートパスが空です")
    logger.info(f"ルートパスを追加しました: {body.path.strip()}")
    return _status_response(controller)


@router.delete("/roots/{index}", response_model=StatusResponse)
async def remove_root(request: Request, index: int):
    """指定位置のルートパスを削除する"""
    controller = get_controller(request)
    if not controller.remove_root(index):
        raise HTTPException(status_code=404, detail=f"ルートパスが見つかりません: {index}")
    return _status_response(controller)

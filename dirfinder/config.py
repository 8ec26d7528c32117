# =============================================================================
# Dir Finder - 設定管理モジュール
# =============================================================================
# config.yaml と環境変数から設定を読み込み、アプリケーション全体で
# 使用可能な設定オブジェクトを提供します。
#
# 使用方法:
#   from dirfinder.config import settings
#   print(settings.root_dirs)
# =============================================================================

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# ログ設定のデータクラス
# ---------------------------------------------------------------------------
class LoggingConfig(BaseModel):
    """
    ログ出力設定を保持するクラス

    Attributes:
        level: ログレベル（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        format: ログフォーマット文字列
    """
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# ---------------------------------------------------------------------------
# サーバー設定のデータクラス
# ---------------------------------------------------------------------------
class ServerConfig(BaseModel):
    """
    HTTP サーバー設定を保持するクラス

    Attributes:
        host: 待ち受けアドレス
        port: 待ち受けポート
    """
    host: str = "127.0.0.1"
    port: int = 8000


# ---------------------------------------------------------------------------
# メイン設定クラス
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """
    アプリケーション全体の設定を管理するクラス

    設定の優先順位:
    1. config.yaml に書かれた値
    2. 環境変数（DIRFINDER_ プレフィックス、YAML にないキーのみ）
    3. デフォルト値

    Attributes:
        root_dirs: 巡回対象のルートパスリスト
        ignore_patterns: 除外パターン（パスに含まれる部分文字列）
        tick_interval_ms: クロール結果を取り込む間隔（ミリ秒）
        search_limit: 検索 API が返す最大件数
        logging: ログ設定
        server: HTTP サーバー設定
    """

    # クロール設定
    root_dirs: List[str] = Field(default_factory=lambda: ["."])
    ignore_patterns: List[str] = Field(default_factory=lambda: [".git"])

    # 画面設定
    tick_interval_ms: int = Field(default=100, gt=0)
    search_limit: int = Field(default=1000, gt=0)

    # サブ設定
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    class Config:
        """Pydantic設定"""
        env_prefix = "DIRFINDER_"  # 環境変数のプレフィックス


def load_config(config_path: str = "config.yaml") -> Settings:
    """
    設定ファイルを読み込み、Settingsオブジェクトを生成する

    YAML に書かれていないキーは環境変数またはデフォルト値が使われます。

    Args:
        config_path: 設定ファイルのパス（デフォルト: config.yaml）

    Returns:
        Settings: 読み込まれた設定オブジェクト

    Raises:
        yaml.YAMLError: YAMLの解析に失敗した場合
        pydantic.ValidationError: 設定値の型が正しくない場合
    """
    config_file = Path(config_path)
    if not config_file.exists():
        # デフォルト設定で動作
        print(f"警告: 設定ファイル {config_path} が見つかりません。デフォルト設定を使用します。")
        return Settings()

    with open(config_file, 'r', encoding='utf-8') as f:
        yaml_config = yaml.safe_load(f) or {}

    # YAML に存在するキーだけを渡す（それ以外は環境変数・デフォルト値）
    known_keys = set(Settings.model_fields)
    values = {key: value for key, value in yaml_config.items() if key in known_keys}

    return Settings(**values)


# ---------------------------------------------------------------------------
# グローバル設定インスタンス
# ---------------------------------------------------------------------------
# アプリケーション起動時に一度だけ読み込まれる
# ---------------------------------------------------------------------------
settings = load_config()

# =============================================================================
# Dir Finder
# =============================================================================
# 複数のルートパス配下のディレクトリをバックグラウンドで収集し、
# 除外パターンで枝刈りしながら UI へ逐次配信するツールです。
# =============================================================================

__version__ = "1.0.0"

# =============================================================================
# Dir Finder - API パッケージ
# =============================================================================

from dirfinder.api.routes import router

__all__ = ["router"]

import pytest


@pytest.fixture
def make_tree(tmp_path):
    """相対パスのリストからディレクトリツリーを作成し、ルートのパス文字列を返す"""
    def _make(name, dirs, files=()):
        root = tmp_path / name
        root.mkdir()
        for rel in dirs:
            (root / rel).mkdir(parents=True, exist_ok=True)
        for rel in files:
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("x", encoding="utf-8")
        return str(root)
    return _make

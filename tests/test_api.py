import os
import time

import pytest
from fastapi.testclient import TestClient

from dirfinder.config import Settings
from dirfinder.main import create_app


def _wait_until_idle(client, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        status = client.get("/api/status").json()
        if not status["indexing_in_progress"]:
            return status
        time.sleep(0.02)
    raise AssertionError("crawl did not finish in time")


@pytest.fixture
def tree(make_tree):
    return make_tree("root", ["a/node_modules/b/c", "a/src", "docs", ".git/objects"])


@pytest.fixture
def client(tree):
    app_settings = Settings(
        root_dirs=[tree],
        ignore_patterns=[".git", "node_modules"],
        tick_interval_ms=10,
        search_limit=2
    )
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client


@pytest.fixture
def crawled(client):
    assert client.post("/api/refresh").status_code == 200
    _wait_until_idle(client)
    return client


def test_status_reports_configuration(client, tree):
    status = client.get("/api/status").json()

    assert status == {
        "root_dirs": [tree],
        "ignore_patterns": [".git", "node_modules"],
        "subdir_count": 0,
        "indexing_in_progress": False,
    }


def test_refresh_collects_subdirs(crawled, tree):
    body = crawled.get("/api/subdirs").json()

    assert body["subdirs"] == [
        tree,
        os.path.join(tree, "a"),
        os.path.join(tree, "a", "src"),
        os.path.join(tree, "docs"),
    ]
    assert body["total"] == 4
    assert not body["indexing_in_progress"]


def test_subdirs_pagination(crawled, tree):
    body = crawled.get("/api/subdirs", params={"offset": 1, "limit": 2}).json()

    assert body["subdirs"] == [os.path.join(tree, "a"), os.path.join(tree, "a", "src")]
    assert body["total"] == 4


def test_subdirs_text_export(crawled, tree):
    response = crawled.get("/api/subdirs/text")

    assert response.status_code == 200
    assert response.text.split("\n") == [
        tree,
        os.path.join(tree, "a"),
        os.path.join(tree, "a", "src"),
        os.path.join(tree, "docs"),
    ]


def test_roots_text_export(client, tree):
    assert client.get("/api/roots/text").text == tree


def test_search_applies_limit(crawled, tree):
    body = crawled.get("/api/search", params={"q": "  A "}).json()

    assert body["needle"] == "a"
    assert body["total_matches"] == 4
    assert len(body["matches"]) == 2


def test_search_narrow_match(crawled, tree):
    body = crawled.get("/api/search", params={"q": "docs"}).json()

    assert body["matches"] == [os.path.join(tree, "docs")]
    assert body["total_matches"] == 1


def test_ignore_pattern_edit_endpoints(client):
    response = client.post("/api/ignore-patterns", json={"pattern": " target "})
    assert response.status_code == 200
    assert response.json()["ignore_patterns"] == [".git", "node_modules", "target"]

    assert client.post("/api/ignore-patterns", json={"pattern": "  "}).status_code == 400

    response = client.delete("/api/ignore-patterns/0")
    assert response.status_code == 200
    assert response.json()["ignore_patterns"] == ["node_modules", "target"]

    assert client.delete("/api/ignore-patterns/9").status_code == 404


def test_root_edit_endpoints(client, tree, tmp_path):
    missing = str(tmp_path / "missing")

    response = client.post("/api/roots", json={"path": missing})
    assert response.status_code == 200
    assert response.json()["root_dirs"] == [tree, missing]

    assert client.post("/api/roots", json={"path": ""}).status_code == 400
    assert client.delete("/api/roots/5").status_code == 404

    response = client.delete("/api/roots/0")
    assert response.json()["root_dirs"] == [missing]


def test_nonexistent_root_crawls_to_zero_results(client):
    client.delete("/api/roots/0")
    client.post("/api/roots", json={"path": "/definitely/not/here"})

    assert client.post("/api/refresh").status_code == 200
    status = _wait_until_idle(client)

    assert status["subdir_count"] == 0


def test_pattern_added_after_crawl_applies_next_time(crawled, tree):
    crawled.post("/api/ignore-patterns", json={"pattern": "docs"})
    assert crawled.get("/api/status").json()["subdir_count"] == 4

    crawled.post("/api/refresh")
    status = _wait_until_idle(crawled)

    assert status["subdir_count"] == 3


def test_search_text_export_is_empty_before_search(client):
    response = client.get("/api/search/text")

    assert response.status_code == 200
    assert response.text == ""


def test_search_text_export_ignores_limit(crawled, tree):
    crawled.get("/api/search", params={"q": "a"})

    response = crawled.get("/api/search/text")

    assert response.text.split("\n") == [
        tree,
        os.path.join(tree, "a"),
        os.path.join(tree, "a", "src"),
        os.path.join(tree, "docs"),
    ]


def test_search_text_export_is_cleared_by_refresh(crawled):
    crawled.get("/api/search", params={"q": "docs"})
    assert crawled.get("/api/search/text").text != ""

    crawled.post("/api/refresh")
    _wait_until_idle(crawled)

    assert crawled.get("/api/search/text").text == ""

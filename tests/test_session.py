import os

import pytest

from dirfinder.crawler.channel import ChannelClosed, open_channel
from dirfinder.crawler.matcher import IgnoreSnapshot
from dirfinder.crawler.messages import DirectoryDiscovered, SessionComplete
from dirfinder.crawler.session import CrawlSessionHandle, HandleClosedError, run_session


class ClosingSink:
    """指定件数を受け取った後に閉じられる送信先（送信の試行は全て記録する）"""

    def __init__(self, capacity):
        self.capacity = capacity
        self.received = []
        self.attempted = []

    def send(self, message):
        self.attempted.append(message)
        if len(self.received) >= self.capacity:
            raise ChannelClosed("closed")
        self.received.append(message)


def _run(roots, patterns=()):
    sender, receiver = open_channel()
    run_session(roots, IgnoreSnapshot.take(patterns), sender)
    return receiver.drain()


def _collect(handle, timeout=5.0):
    assert handle.wait(timeout)
    return handle.poll()


def test_existing_empty_root_reports_itself_then_completes(make_tree):
    root = make_tree("empty", [])

    assert _run([root]) == [DirectoryDiscovered(root), SessionComplete()]


def test_nonexistent_root_only_completes(tmp_path):
    assert _run([str(tmp_path / "missing")]) == [SessionComplete()]


def test_no_roots_only_completes():
    assert _run([]) == [SessionComplete()]


def test_git_subtree_is_excluded(make_tree):
    root = make_tree("a", ["x", ".git/objects"])

    assert _run([root], [".git"]) == [
        DirectoryDiscovered(root),
        DirectoryDiscovered(os.path.join(root, "x")),
        SessionComplete(),
    ]


def test_roots_are_processed_sequentially(make_tree):
    first = make_tree("a", ["one", "two/three"])
    second = make_tree("b", ["four"])

    messages = _run([first, second])

    paths = [m.path for m in messages if isinstance(m, DirectoryDiscovered)]
    first_paths = [p for p in paths if p.startswith(first + os.sep) or p == first]
    second_paths = [p for p in paths if p.startswith(second + os.sep) or p == second]
    assert paths == first_paths + second_paths
    assert len(first_paths) == 4
    assert len(second_paths) == 2
    assert messages[-1] == SessionComplete()
    assert messages.count(SessionComplete()) == 1


def test_duplicate_roots_are_walked_twice(make_tree):
    root = make_tree("a", ["x"])

    messages = _run([root, root])

    assert messages == [
        DirectoryDiscovered(root),
        DirectoryDiscovered(os.path.join(root, "x")),
        DirectoryDiscovered(root),
        DirectoryDiscovered(os.path.join(root, "x")),
        SessionComplete(),
    ]


def test_missing_root_does_not_abort_later_roots(make_tree, tmp_path):
    root = make_tree("a", [])

    assert _run([str(tmp_path / "missing"), root]) == [
        DirectoryDiscovered(root),
        SessionComplete(),
    ]


def test_closed_sink_stops_current_root_and_still_starts_next(make_tree):
    first = make_tree("a", ["x", "y"])
    second = make_tree("b", ["z"])
    sink = ClosingSink(capacity=1)

    run_session([first, second], IgnoreSnapshot.take([]), sink)

    assert sink.received == [DirectoryDiscovered(first)]
    assert sink.attempted == [
        DirectoryDiscovered(first),
        DirectoryDiscovered(os.path.join(first, "x")),
        DirectoryDiscovered(second),
        SessionComplete(),
    ]


def test_handle_streams_results_from_background(make_tree):
    first = make_tree("a", ["x"])
    second = make_tree("b", [])
    handle = CrawlSessionHandle()

    handle.start([first, second], [".git"])
    messages = _collect(handle)

    assert messages == [
        DirectoryDiscovered(first),
        DirectoryDiscovered(os.path.join(first, "x")),
        DirectoryDiscovered(second),
        SessionComplete(),
    ]
    assert not handle.is_busy
    handle.shutdown()


def test_handle_takes_snapshot_at_start(make_tree):
    root = make_tree("a", ["keep", "skip"])
    roots = [root]
    patterns = ["skip"]
    handle = CrawlSessionHandle()

    handle.start(roots, patterns)
    patterns.append("keep")
    roots.append(root)
    messages = _collect(handle)

    assert messages == [
        DirectoryDiscovered(root),
        DirectoryDiscovered(os.path.join(root, "keep")),
        SessionComplete(),
    ]
    handle.shutdown()


def test_handle_poll_is_empty_before_start():
    handle = CrawlSessionHandle()
    assert handle.poll() == []
    handle.shutdown()


def test_handle_runs_overlapping_sessions(make_tree):
    root = make_tree("a", [])
    handle = CrawlSessionHandle()

    handle.start([root], [])
    handle.start([root], [])
    messages = _collect(handle)

    assert messages.count(SessionComplete()) == 2
    assert messages.count(DirectoryDiscovered(root)) == 2
    handle.shutdown()


def test_start_after_shutdown_raises(make_tree):
    first = make_tree("a", ["x", "y", "z"])
    second = make_tree("b", ["w"])
    handle = CrawlSessionHandle()

    handle.shutdown()
    assert handle.is_closed
    with pytest.raises(HandleClosedError):
        handle.start([first, second], [])


def test_shutdown_during_session_ends_worker(make_tree):
    roots = [make_tree(f"r{i}", [f"d{j}/e" for j in range(20)]) for i in range(3)]
    handle = CrawlSessionHandle()

    handle.start(roots, [])
    handle.shutdown()

    assert handle.wait(5.0)
    assert handle.poll() == []

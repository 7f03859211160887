import threading

import pytest

from dfl.chase_lev import ChaseLevDeque
from dfl.faa_queue import FAAQueue
from dfl.job import Job
from dfl.worker import WorkerGroup, Worker

WAIT = 10


class _Collector:
    def __init__(self, expected):
        self.expected = expected
        self.items = []
        self.lock = threading.Lock()
        self.done = threading.Event()

    def add(self, item):
        with self.lock:
            self.items.append(item)
            if len(self.items) >= self.expected:
                self.done.set()


def test_group_needs_workers():
    with pytest.raises(ValueError):
        WorkerGroup(0)


def test_no_current_group_outside_jobs():
    assert WorkerGroup.get_current() is None


def test_jobs_from_outside_run_once_each():
    count = 50
    collector = _Collector(count)
    with WorkerGroup(2) as group:
        for i in range(count):
            group.push(Job(collector.add, i))
        assert collector.done.wait(WAIT)
    assert sorted(collector.items) == list(range(count))


def test_current_group_is_set_inside_job():
    collector = _Collector(1)
    with WorkerGroup(2) as group:
        group.push(Job(lambda _: collector.add(WorkerGroup.get_current()), None))
        assert collector.done.wait(WAIT)
    assert collector.items == [group]


def test_jobs_pushed_from_jobs_run():
    children = 20
    collector = _Collector(children)
    parents_seen = []

    def parent(_):
        current = WorkerGroup.get_current()
        parents_seen.append(current)
        for i in range(children):
            current.push(Job(collector.add, i))

    with WorkerGroup(3) as group:
        group.push(Job(parent, None))
        assert collector.done.wait(WAIT)
    assert parents_seen == [group]
    assert sorted(collector.items) == list(range(children))


def test_local_overflow_runs_older_jobs():
    children = 600
    collector = _Collector(children)
    parents_seen = []

    def parent(_):
        current = WorkerGroup.get_current()
        parents_seen.append(current)
        for i in range(children):
            current.push(Job(collector.add, i))

    with WorkerGroup(1) as group:
        group.push(Job(parent, None))
        assert collector.done.wait(WAIT)
    assert parents_seen == [group]
    assert sorted(collector.items) == list(range(children))


def test_failing_job_does_not_stop_worker():
    collector = _Collector(1)

    def boom(_):
        raise ValueError("boom")

    with WorkerGroup(1) as group:
        group.push(Job(boom, None))
        group.push(Job(collector.add, "after"))
        assert collector.done.wait(WAIT)
    assert collector.items == ["after"]


def test_worker_runs_global_jobs_on_its_thread():
    queues = [ChaseLevDeque()]
    global_queue = FAAQueue()
    collector = _Collector(1)
    worker = Worker(0, None, queues, global_queue)
    try:
        global_queue.push(Job(lambda _: collector.add(threading.get_ident()), None))
        assert collector.done.wait(WAIT)
    finally:
        worker.stop()
    assert worker.join(WAIT)
    assert collector.items == [worker.thread_id()]


def test_worker_steals_from_peer_queue():
    queues = [ChaseLevDeque(), ChaseLevDeque()]
    collector = _Collector(1)
    queues[1].push(Job(collector.add, "stolen"))
    worker = Worker(0, None, queues, FAAQueue())
    try:
        assert collector.done.wait(WAIT)
    finally:
        worker.stop()
    assert worker.join(WAIT)
    assert collector.items == ["stolen"]
    assert len(queues[1]) == 0


def test_stop_ends_worker_threads():
    group = WorkerGroup(2)
    group.stop()
    workers = group._workers
    assert all(worker.join(WAIT) for worker in workers)
import asyncio

import pytest

from dfl.task import Task, task
from dfl.worker import WorkerGroup

TIMEOUT = 10


@task
async def echo(value):
    return value


@task
async def fail(message):
    raise ValueError(message)


@task
async def chain(depth):
    if depth == 0:
        return 0
    return await chain(depth - 1) + 1


def test_scheduled_task_returns_value():
    with WorkerGroup(2) as group:
        result = echo(("done", 7)).schedule(group).wait(TIMEOUT)
    assert result == ("done", 7)


def test_exception_is_raised_by_wait():
    with WorkerGroup(2) as group:
        t = fail("boom").schedule(group)
        with pytest.raises(ValueError, match="boom"):
            t.wait(TIMEOUT)
    assert t.done() is True


def test_void_task_returns_none():
    @task
    async def nothing():
        pass

    with WorkerGroup(1) as group:
        assert nothing().schedule(group).wait(TIMEOUT) is None


def test_not_done_until_scheduled():
    t = echo("x")
    assert t.done() is False
    with pytest.raises(TimeoutError):
        t.wait(0.05)
    with WorkerGroup(1) as group:
        t.schedule(group)
        assert t.wait(TIMEOUT) == "x"
    assert t.done() is True


def test_wait_repeats_result():
    with WorkerGroup(1) as group:
        t = echo("same").schedule(group)
        first = t.wait(TIMEOUT)
        second = t.wait(TIMEOUT)
    assert first == second == "same"


def test_schedule_returns_self_and_runs_once():
    runs = []

    @task
    async def record():
        runs.append(1)
        return len(runs)

    with WorkerGroup(3) as group:
        t = record()
        assert t.schedule(group) is t
        assert t.schedule(group) is t
        t.wait(TIMEOUT)
    assert runs == [1]


def test_parent_awaits_child():
    @task
    async def parent(value):
        child_result = await echo(value)
        return ["parent", child_result]

    with WorkerGroup(2) as group:
        result = parent("child").schedule(group).wait(TIMEOUT)
    assert result == ["parent", "child"]


def test_child_exception_propagates_to_parent():
    @task
    async def parent():
        try:
            await fail("inner")
        except ValueError as exc:
            return str(exc)
        return "no error"

    with WorkerGroup(2) as group:
        assert parent().schedule(group).wait(TIMEOUT) == "inner"


def test_fan_out_collects_all_results():
    @task
    async def gather(count):
        children = [echo(i) for i in range(count)]
        return [await child for child in children]

    with WorkerGroup(4) as group:
        result = gather(20).schedule(group).wait(TIMEOUT)
    assert result == list(range(20))


def test_deep_chain_of_awaits():
    with WorkerGroup(2) as group:
        assert chain(50).schedule(group).wait(TIMEOUT) == 50


def test_await_already_scheduled_child():
    @task
    async def parent(child):
        return await child

    with WorkerGroup(2) as group:
        child = echo("early").schedule(group)
        result = parent(child).schedule(group).wait(TIMEOUT)
    assert result == "early"


def test_await_finished_child_resumes_immediately():
    @task
    async def parent(child):
        first = await child
        second = await child
        return (first, second)

    with WorkerGroup(2) as group:
        child = echo("v").schedule(group)
        child.wait(TIMEOUT)
        result = parent(child).schedule(group).wait(TIMEOUT)
    assert result == ("v", "v")


def test_awaiting_foreign_awaitable_raises_type_error():
    @task
    async def bad():
        await asyncio.sleep(0)

    with WorkerGroup(1) as group:
        t = bad().schedule(group)
        with pytest.raises(TypeError):
            t.wait(TIMEOUT)


def test_task_requires_coroutine():
    with pytest.raises(TypeError):
        Task(123)


def test_decorator_keeps_name():
    async def square(value):
        return value * value

    wrapped = task(square)
    assert wrapped.__name__ == "square"
    t = wrapped(3)
    assert isinstance(t, Task)
    assert t.done() is False
    with WorkerGroup(1) as group:
        assert t.schedule(group).wait(TIMEOUT) == 9
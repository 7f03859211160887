# dfl

A small library in two parts:

- **Streams.** `dfl.stream.Stream` is an abstract byte stream.
  `dfl.stream.SafeHandleStream` implements it over a file descriptor owned by a
  `dfl.handle.SafeHandle`. `dfl.named_pipe` builds named pipes on top of it.
  A named pipe is a Unix domain socket at `/tmp/<name>`.
- **Tasks.** `dfl.worker.WorkerGroup` is a work-stealing scheduler. It uses
  per-worker deques (`dfl.chase_lev.ChaseLevDeque`) and one shared bounded queue
  (`dfl.faa_queue.FAAQueue`). `dfl.job.Job` is a plain unit of work, and
  coroutine tasks (`dfl.task.Task`) run on the scheduler.

It needs Python 3.10 or later on a POSIX system, because it uses `select.poll`
and Unix domain sockets. It has no dependencies outside the standard library.

## Installing

```
pip install .
```

## Handles

`SafeHandle(fd)` owns a file descriptor and closes it on `close()`, on leaving a
`with` block, or when it is garbage-collected.

- `SafeHandle.invalid()` owns nothing.
- `is_valid()` and `bool(handle)` tell whether a descriptor is owned.
- `fileno()` returns the descriptor. It raises `ValueError` on an invalid handle.
- `replace(other)` closes the current descriptor and takes over the one `other`
  holds. `other` is left invalid.

## Streams

`Stream` has the methods `poll(timeout)`, `write(data)`, `read(size)`, `flush()`,
`copy_to(dst)` and `close()`, and it can be used as a context manager.

- Timeouts are in seconds. `None` or a negative value waits forever.
- `read` returns `bytes`. An empty result means end of stream.
- `copy_to(dst)` reads in chunks until end of stream and writes every chunk
  fully into `dst`. It returns the number of bytes copied, and raises `OSError`
  if `dst.write` writes nothing.

`SafeHandleStream(handle)` reads and writes the handle's descriptor directly:

- `poll` waits for the descriptor to become readable. If the wait itself fails,
  it issues a `RuntimeWarning` and returns `False`.
- `flush` syncs the descriptor's data to the device and ignores errors.
- `bool(stream)` is false when the handle is invalid.

## Named pipes

```python
import threading
import time
from dfl.named_pipe import NamedPipeServerStream, NamedPipeClientStream

def serve():
    with NamedPipeServerStream("my_pipe") as server:
        server.wait_for_connection(None)      # None or a negative value waits forever
        request = server.read(64)
        server.write(b"Hello from Server!")

thread = threading.Thread(target=serve)
thread.start()
time.sleep(0.5)                               # let the server start listening

with NamedPipeClientStream("my_pipe") as client:
    client.write(b"Hello from Client!")
    print(client.read(64))
thread.join()
```

- `pipe_path(name)` returns the socket path used for a name (`/tmp/<name>`).
- `NamedPipeServerStream(name)` removes any existing file at that path, then
  binds and listens. It raises `OSError` if that fails.
- `wait_for_connection(timeout)` returns `False` on timeout and `True` once a
  client is accepted. The stream then reads from and writes to that client.
- `NamedPipeClientStream(name)` connects at once and raises `OSError` if no
  server is listening.
- The `name` property returns the pipe's name.
- `bool(server)` is true while the listening socket is open.
- `close()` on a server closes both the connection and the listener.

## Jobs and queues

`Job(fn, data)` is a frozen dataclass. Calling it runs `fn(data)` and returns the
result. A job without a function raises `RuntimeError` when called.

`ChaseLevDeque` and `FAAQueue` each hold up to 512 jobs and are thread-safe.

- `push(job)` returns `False` when the container is full.
- `len()` gives the current number of jobs.
- `ChaseLevDeque.pop()` takes the newest job and `steal()` takes the oldest.
  Both return `None` when the deque is empty.
- `FAAQueue.pop()` takes the oldest job, or returns `None` when the queue is empty.

## Worker groups

`WorkerGroup(size)` starts `size` daemon worker threads and raises `ValueError`
if `size` is less than 1. Each worker repeatedly:

1. takes a job from its own deque,
2. then from the shared queue,
3. then steals from the other workers' deques.

A job that raises is logged through the `dfl.worker` logger. The exception is
not passed on.

- `group.push(job)` called from one of the group's workers puts the job on that
  worker's deque. If the deque is full, older jobs are run inline until there is
  room. Called from any other thread, `push` puts the job on the shared queue
  and waits while that queue is full.
- `WorkerGroup.get_current()` returns the group whose job the calling thread is
  running, or `None`.
- `stop()` asks every worker to stop after its current job.
- Leaving a `with` block stops the workers and joins them. Jobs that are still
  queued at that point are not run.

```python
from dfl.job import Job
from dfl.worker import WorkerGroup

with WorkerGroup(2) as group:
    group.push(Job(print, "hello"))
```

## Tasks

```python
from dfl.task import task
from dfl.worker import WorkerGroup

@task
async def square(x):
    return x * x

@task
async def total(n):
    result = 0
    for i in range(n):
        result += await square(i)
    return result

with WorkerGroup(4) as group:
    print(total(10).schedule(group).wait())   # 285
```

`Task(coro)` wraps a coroutine, which stays suspended until it is scheduled. The
`task` decorator makes a coroutine function return a `Task`.

- `schedule(group)` queues the task and returns it. Scheduling a task that has
  already started does nothing.
- `done()` tells whether the coroutine has returned or raised.
- `wait(timeout=None)` blocks until the task finishes. It then returns the
  result or raises the task's exception. It raises `TimeoutError` if the timeout
  passes first.

Inside a running task, `await child` schedules the child on the current worker
group. The parent resumes on the thread that finishes the child. Some cases
raise inside the task instead:

- Awaiting a child while no worker group is current raises
  `RuntimeError("Task result awaited before completion.")`.
- Awaiting anything other than a `Task` raises `TypeError`.

## What it does not do

- Named pipes are Unix domain sockets only. The package does not support Windows.
- It has no command-line tool; it is a library to import.

## Tests

```
pip install .[test]
pytest
```
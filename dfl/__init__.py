"""Byte streams over Unix domain socket named pipes and a work-stealing task scheduler."""

__version__ = "0.1.0"

__all__ = ["chase_lev", "faa_queue", "handle", "job", "named_pipe", "stream", "task", "worker"]
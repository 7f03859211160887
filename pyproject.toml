[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dfl"
version = "0.1.0"
description = "Byte streams over Unix domain socket named pipes and a work-stealing task scheduler"
requires-python = ">=3.10"
dependencies = []
keywords = ["named pipe", "unix socket", "stream", "work stealing", "scheduler", "task", "deque", "coroutine"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dfl"]

[tool.pytest.ini_options]
addopts = "-ra"

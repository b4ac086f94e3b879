[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "teldrive"
version = "0.1.0"
description = "Building blocks of a channel-backed file drive: chunked encryption with seeking, range parsing, part readers and RPC retry"
requires-python = ">=3.11"
keywords = ["drive", "file-sharing", "encryption", "streaming", "http-range"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: File Sharing",
    "Typing :: Typed",
]
dependencies = [
    "pynacl",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["teldrive"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true

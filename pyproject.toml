[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imapkit"
version = "0.1.0"
description = "IMAP protocol building blocks: modified UTF-7, sequence sets, field writing and status responses"
requires-python = ">=3.10"
dependencies = []
keywords = ["imap", "email", "utf-7", "sequence-set", "mailbox"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Email :: Post-Office :: IMAP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["imapkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

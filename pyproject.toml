[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gbsip"
version = "0.1.0"
description = "SIP message model, transactions and helpers for GB/T 28181 video surveillance signalling"
requires-python = ">=3.10"
dependencies = []
keywords = ["sip", "gb28181", "video", "surveillance", "digest", "zlmediakit"]
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
    "Topic :: Communications :: Telephony",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gbsip"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

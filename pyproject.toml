[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nhpkit"
version = "0.6.0"
description = "Support utilities for network-hiding services: async logging, iptables and ipset control, caching and crypto helpers"
requires-python = ">=3.10"
keywords = ["firewall", "iptables", "ipset", "logging", "network", "access-control"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Firewalls",
    "Topic :: System :: Logging",
]
dependencies = [
    "cryptography",
    "watchdog",
    "requests",
    "psutil",
    "sqlalchemy",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["nhpkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

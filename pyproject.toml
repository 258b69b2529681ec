[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tway"
version = "0.1.0"
description = "Core data structures of a small proof-of-work blockchain node: blocks, transactions, Merkle roots, wallets, peer messages and request history."
requires-python = ">=3.10"
keywords = ["blockchain", "merkle", "base58", "wallet", "ecdsa", "p2p"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["tway"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mailnetlib"
version = "0.1.0"
description = "Network client and server helpers, external resource cache and the logic behind a mail viewer and account editor"
requires-python = ">=3.10"
dependencies = []
keywords = ["email", "mail", "network", "client", "server", "html-viewer", "accounts"]
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
    "Topic :: Communications :: Email",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mailnetlib"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

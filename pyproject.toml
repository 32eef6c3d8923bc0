[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cmdhttpd"
version = "0.1.0"
description = "A small HTTP/1.0 server that runs simple commands for GET requests on worker thread pools"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "http/1.0", "worker-pool", "commands"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cmdhttpd = "cmdhttpd.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["cmdhttpd"]

[tool.pytest.ini_options]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flyweight"
version = "0.1.0"
description = "A small threaded HTTP/1.1 server with echo, user-agent and static file endpoints"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "static-files", "gzip", "thread-pool"]
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
flyweight = "flyweight.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["flyweight"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chatup"
version = "0.1.0"
description = "A small TCP chat room: a relay server, a terminal client and the message protocol they share"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "tcp", "client", "server", "messaging"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
chatup-server = "chatup.servercomponent:main"
chatup-client = "chatup.clientapp:main"

[tool.hatch.build.targets.wheel]
packages = ["chatup"]

[tool.pytest.ini_options]
addopts = "-ra"

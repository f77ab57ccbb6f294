[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "huisserver"
version = "0.1.0"
description = "Home automation server core: clock, web sessions, request handling for a small site server, LED strip groups and UDP broadcast."
requires-python = ">=3.10"
dependencies = []
keywords = ["home automation", "domotics", "led strip", "web sessions", "udp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["huisserver"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "esh"
version = "0.1.0"
description = "Runtime building blocks of an extensible shell: terms, bindings, quoting, globbing, descriptor bookkeeping and input sources"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "glob", "quoting", "interpreter", "tilde-expansion"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["esh"]

[tool.pytest.ini_options]
addopts = "-ra"

[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "helpdex"
version = "0.1.0"
description = "Full-text indexing and search of installed HTML help documentation, with search handler descriptions, tables of contents and search scopes"
requires-python = ">=3.10"
dependencies = []
keywords = ["help", "documentation", "search", "index", "docbook", "toc"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Indexing",
    "Topic :: Documentation",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
helpdex-index = "helpdex.indexer:main"
helpdex-search = "helpdex.search:main"

[tool.setuptools.packages.find]
include = ["helpdex*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bookwright"
version = "0.1.0"
description = "Load books written as Markdown chapters described by a SUMMARY.md, and plan their preprocessing and rendering"
requires-python = ">=3.11"
keywords = ["markdown", "book", "summary", "documentation", "preprocessor", "renderer"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Documentation",
    "Topic :: Text Processing :: Markup :: Markdown",
]
dependencies = [
    "markdown-it-py",
    "semver",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
bookwright-nop = "bookwright.nop:main"

[tool.hatch.build.targets.wheel]
packages = ["bookwright"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "namuki"
version = "0.1.0"
description = "Wiki engine core: access control, user display, document settings, wiki markup rendering and JSON API handlers"
requires-python = ">=3.10"
keywords = ["wiki", "namumark", "markdown", "acl", "renderer"]
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
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content :: Wiki",
    "Topic :: Text Processing :: Markup",
]
dependencies = [
    "markdown-it-py",
    "pymysql",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["namuki"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true

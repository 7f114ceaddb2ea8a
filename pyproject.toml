[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "atlantis"
version = "0.2.4"
description = "Terraform pull request automation helpers for GitHub and GitLab"
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["terraform", "github", "gitlab", "pull-request", "automation", "infrastructure"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
atlantis = "atlantis.cli:main"
atlantis-e2e = "atlantis.e2e:main"

[tool.hatch.build.targets.wheel]
packages = ["atlantis"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

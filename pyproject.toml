[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "nodeflow"
version = "0.1.0"
description = "Node flow model: cycle-free node graphs, canvas geometry, concurrent simulated execution and JSON persistence"
requires-python = ">=3.10"
dependencies = []
keywords = ["node-graph", "flow", "dag", "workflow", "topological-sort"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nodeflow = "nodeflow.workspace:main"

[tool.setuptools.packages.find]
include = ["nodeflow*"]

[tool.pytest.ini_options]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cwasm"
version = "0.1.0"
description = "Assembler that turns Corewar champion sources (.s) into .cor bytecode"
requires-python = ">=3.10"
dependencies = []
keywords = ["corewar", "assembler", "bytecode", "champion"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Assemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cwasm = "cwasm.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["cwasm"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true

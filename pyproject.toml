[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zkcircuit"
version = "0.1.0"
description = "Constraint-system backends (PLONK-style gates and R1CS) for zero-knowledge circuits, with witness generation and snarkjs export"
requires-python = ">=3.10"
dependencies = []
keywords = ["zero-knowledge", "circuit", "r1cs", "plonk", "snarkjs", "witness"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Security :: Cryptography",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zkcircuit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "circle_stark"
version = "0.1.0"
description = "Mersenne-31 field arithmetic, circle groups and cosets, a Blake2s Fiat-Shamir channel, and lane-wise forward and inverse circle FFTs."
requires-python = ">=3.10"
dependencies = []
keywords = ["stark", "mersenne31", "circle-fft", "finite-field", "fiat-shamir"]
classifiers = [
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Topic :: Security :: Cryptography",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["circle_stark"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

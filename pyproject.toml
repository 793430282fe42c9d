[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "phdoser"
version = "0.0.8"
description = "pH watching and acid dosing controller built around a cluster-voting ADC reader"
requires-python = ">=3.10"
dependencies = []
keywords = ["ph", "dosing", "hydroponics", "pump", "calibration", "sensor", "controller"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Chemistry",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
phdoser = "phdoser.controller:main"

[tool.hatch.build.targets.wheel]
packages = ["phdoser"]

[tool.pytest.ini_options]
addopts = "-ra"

[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "splattrain"
version = "0.2.0"
description = "Gaussian splat training helpers: COLMAP readers, scaled Adam, weighted sampling and refinement statistics"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["gaussian-splatting", "colmap", "adam", "optimizer", "3d", "reconstruction"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["splattrain"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

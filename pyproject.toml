[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "opmonred"
version = "0.1.0"
description = "Animated main menu for the OPMon Red game, with small PNG, BMP, TGA, HDR and JPEG image writers"
requires-python = ">=3.10"
keywords = ["game", "menu", "pygame", "png", "jpeg", "bmp", "tga", "hdr"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
opmonred = "opmonred.menu:main"

[tool.hatch.build.targets.wheel]
packages = ["opmonred"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

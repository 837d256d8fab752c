[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pinnacle_config"
version = "0.1.0"
description = "Configuration client for the Pinnacle Wayland compositor, speaking its MessagePack socket protocol"
requires-python = ">=3.10"
dependencies = [
    "msgpack",
]
keywords = ["wayland", "compositor", "window manager", "configuration", "msgpack"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment :: Window Managers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
pinnacle-example-config = "pinnacle_config.example:main"

[tool.hatch.build.targets.wheel]
packages = ["pinnacle_config"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true

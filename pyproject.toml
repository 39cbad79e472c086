[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pyusbfs"
version = "0.1.0"
description = "USB descriptor parsing and Linux usbfs/sysfs device enumeration"
requires-python = ">=3.10"
dependencies = []
keywords = ["usb", "usbfs", "sysfs", "descriptors", "linux"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware :: Universal Serial Bus (USB)",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pyusbfs = "pyusbfs.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pyusbfs"]

[tool.pytest.ini_options]
addopts = "-ra"

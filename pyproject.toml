[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gorillaos"
version = "0.1.0"
description = "A small i686 hobby kernel and its FAT12 tooling, modelled in Python: text console, printf, kernel logging, descriptor tables, the 8259 PIC, and a FAT12 disk image reader."
requires-python = ">=3.10"
dependencies = []
keywords = ["fat12", "kernel", "bootloader", "vga", "i8259", "gdt", "idt", "disk-image", "printf"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: System :: Filesystems",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gorillaos-fat = "gorillaos.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gorillaos"]

[tool.pytest.ini_options]
addopts = "-ra"

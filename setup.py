#!/usr/bin/env python3
"""Setup script for the Ruby Language Server package."""

import sys

from setuptools import find_packages, setup

# Read version from the package
with open("rblsp/__init__.py") as f:
    for line in f:
        if line.startswith("__version__"):
            version = line.split("=")[1].strip().strip('"').strip("'")
            break
    else:
        version = "0.0.0"

# Read long description from README
with open("README.md") as f:
    long_description = f.read()

# Display warning about external dependencies
print("""
IMPORTANT: This package relies on external tools that cannot be installed via pip:
- For diagnostics: a Ruby interpreter on PATH (or passed with --ruby)
- For method completion: the rcodetools gem (`gem install rcodetools`)

Please refer to the README.md for complete installation instructions.
""", file=sys.stderr)

setup(
    name="rblsp",
    version=version,
    description="Language server for Ruby with diagnostics and code completion",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pydantic>=2.0.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rblsp=rblsp.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
)

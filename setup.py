#!/usr/bin/env python3
"""
Serqlane Programming Language
Compiler front end: lexer, keyword recognizer and Pratt parser.
"""

from setuptools import setup, find_packages
import os
import sys

# Ensure Python 3.8+
if sys.version_info < (3, 8):
    raise RuntimeError("Serqlane requires Python 3.8 or later")

# Read version from _version.py
here = os.path.abspath(os.path.dirname(__file__))
version_file = os.path.join(here, "serqlane", "_version.py")
version = {}
if os.path.exists(version_file):
    with open(version_file) as f:
        exec(f.read(), version)
else:
    version["__version__"] = "0.1.0"

# Read README
readme_file = os.path.join(here, "README.md")
with open(readme_file, "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="serqlane",
    version=version.get("__version__", "0.1.0"),
    description="Front end (lexer and parser) for the Serqlane programming language",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*", "scripts", "scripts.*"]),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        # The front end has no external dependencies
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pytest-benchmark>=4.0.0",
            "black>=23.3.0",
            "flake8>=6.0.0",
            "mypy>=1.4.0",
            "isort>=5.12.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "serqlane=serqlane.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Compilers",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords=[
        "programming-language", "compiler", "lexer", "parser", "pratt-parser",
        "perfect-hash",
    ],
    zip_safe=False,
    platforms=["Windows", "Linux", "macOS"],
)

#!/usr/bin/env python3
"""Setup script for the Azure Boards work item cloner.
"""

from pathlib import Path

from setuptools import find_packages, setup

here = Path(__file__).parent

# Read requirements from requirements.txt file
requirements = (here / "requirements.txt").read_text().splitlines()

# Remove any comments or blank lines from requirements
requirements = [line for line in requirements if line and not line.startswith("#")]

setup(
    name="wiclone",
    version="0.1.0",
    description="Clone Azure Boards work items and their child trees",
    packages=find_packages(include=["wiclone", "wiclone.*"]),
    include_package_data=True,
    python_requires=">=3.12,<4.0",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=8.0"],
    },
    license="MIT",
    entry_points={
        "console_scripts": [
            "wiclone=wiclone.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)

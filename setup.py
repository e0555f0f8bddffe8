#!/usr/bin/python
# -*- encoding: utf-8 -*-
import ast
import re

from setuptools import find_packages
from setuptools import setup

## The version number is kept as icsparser.__version__ only, and
## picked out of the source here rather than by importing the package
_version_re = re.compile(r"__version__\s+=\s+(.*)")
with open("icsparser/__init__.py", "rb") as f:
    version = str(
        ast.literal_eval(_version_re.search(f.read().decode("utf-8")).group(1))
    )

if __name__ == "__main__":
    test_packages = [
        "pytest",
        "pytest-coverage",
        "coverage",
        "icalendar",
    ]

    setup(
        name="icsparser",
        version=version,
        description="Tolerant iCalendar (RFC5545) parser",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: Apache Software License",
            "Operating System :: OS Independent",
            "Programming Language :: Python",
            "Programming Language :: Python :: 3",
            "Topic :: Office/Business :: Scheduling",
            "Topic :: Software Development :: Libraries " ":: Python Modules",
        ],
        keywords="icalendar ics rfc5545 parser",
        license="Apache-2.0",
        packages=find_packages(exclude=["tests", "tests.*"]),
        include_package_data=True,
        zip_safe=False,
        python_requires=">=3.9",
        install_requires=[
            "requests",
            "python-dateutil",
            "typing_extensions",
        ],
        extras_require={
            "test": test_packages,
        },
    )

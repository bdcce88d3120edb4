"""Settings for building package."""

from setuptools import find_packages, setup

from remscontent import __author__, __title__, __version__

with open("requirements.txt") as reqs:
    requirements = reqs.read().splitlines()

setup(
    # There are some restrictions on what makes a valid project name
    # specification here:
    # https://packaging.python.org/specifications/core-metadata/#name
    name="remscontent",
    # Versions should comply with PEP 440:
    # https://www.python.org/dev/peps/pep-0440/
    version=__version__,
    description=__title__,
    author=__author__,
    classifiers=["License :: OSI Approved :: MIT License"],
    python_requires=">=3.11",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    extras_require={
        "test": ["coverage>=7.0", "pytest>=8.0", "pytest-asyncio>=0.23", "pytest-cov>=4.1", "tox>=4.0"],
    },
    entry_points={"console_scripts": ["remscontent=remscontent.cli:main"]},
)

from setuptools import setup, find_packages

setup(
    name="mkdocs-whatsupdoc",
    version="0.3.0",
    description="MkDocs plugin and extractor for EScript C++ binding documentation",
    keywords="mkdocs escript clang binding documentation python",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "mkdocs>=1.4",
        "libclang>=16",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers = [
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Documentation",
        "Topic :: Software Development :: Documentation",
        "Framework :: MkDocs",
    ],
    entry_points={
        "mkdocs.plugins": [
            "whatsupdoc = mkdocs_whatsupdoc.plugin:WhatsupdocPlugin",
        ],
        "console_scripts": [
            "whatsupdoc = mkdocs_whatsupdoc.cli:main",
        ],
    },
)

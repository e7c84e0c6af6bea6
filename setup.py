#!/usr/bin/env python
from setuptools import setup, find_packages

setup(
    name="manifoldmeasures",
    version="0.1.0",
    description="Probability measures on Riemannian manifolds: densities, normalizing constants and exact samplers",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",

    # finds manifoldmeasures/ and its subpackages, but not the tests
    packages=find_packages(exclude=["tests*", "docs*"]),

    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],

    include_package_data=False,
)

# Based on:
# https://betterscientificsoftware.github.io/
# python-for-hpc/tutorials/python-pypi-packaging/

from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="expmv",
    version="0.1.0",
    description="Krylov subspace approximation of the matrix exponential acting on a vector",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="GPLv3",
    packages=["expmv"],
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "scipy",
        "termcolor",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: OS Independent",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Mathematics"
    ],
)

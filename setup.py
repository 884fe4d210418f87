import setuptools
from pathlib import Path

with Path("README.md").open(encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    name="chipviz",
    version="0.1.0",
    author="OUS AMG",
    description="Overlap and composition plots for ChIP-Seq differential binding",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        "pandas>=1.3.0,<3",
        "numpy>=1.20.0,<2.4",
        "matplotlib>=3.3.0",
        "bioframe>=0.4.0",
        "matplotlib-venn>=1.0",
        "upsetplot>=0.9.0",
        "seaborn>=0.11.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    packages=setuptools.find_packages(exclude=["*.tests", "*.tests.*"]),
    entry_points={
        "console_scripts": [
            "chipviz=chipviz.__main__:main",
        ],
    },
    python_requires=">=3.8",
)

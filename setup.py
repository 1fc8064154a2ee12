"""Setup script for the region-weather package."""

from setuptools import setup, find_packages

setup(
    name="region-weather",
    version="0.1.0",
    description="Deterministic hour-by-hour weather for tabletop RPG regions",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={
        "": ["*.md", "*.txt"],
    },
    include_package_data=True,
    install_requires=[
        "numpy",
        "opensimplex",
        "ephem",
        "metpy",
        "xarray",
    ],
    extras_require={
        "examples": ["matplotlib"],
        "test": ["pytest"],
    },
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Games/Entertainment :: Role-Playing",
    ],
    python_requires=">=3.8",
)

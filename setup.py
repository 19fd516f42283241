from setuptools import setup, find_packages

setup(
    name="bracketcast",
    version="0.1.0",
    description="Rating, ranking and bracket projection engine for collegiate basketball leagues",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.22.4",
        "pandas>=1.5.3",
        "scipy>=1.10.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "bracketcast=bracketcast.main:main",
        ],
    },
)

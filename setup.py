from setuptools import setup, find_packages

setup(
    name="doublegen",
    version="0.1.0",
    description="doublegen: test-double traits for Rust, generated from the trait itself",
    packages=find_packages(exclude=["tests*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "doublegen=doublegen.cli:main",
        ],
    },
)

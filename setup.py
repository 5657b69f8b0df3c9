# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="incgraph",
    version="0.1.0",
    description="Static #include dependency graph builder for modular C/C++ source trees",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["incgraph", "incgraph.*"]),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "incgraph=incgraph.main:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

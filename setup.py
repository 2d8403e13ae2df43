from setuptools import setup, find_packages

setup(
    name="patch_reconciler",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    author="Uday Kanth",
    description="Fuzzy matching and reconciliation of model-proposed file edits.",
)

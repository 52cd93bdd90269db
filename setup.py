"""
Setup script for lexicon-trainer.

Lexicon is a terminal vocabulary-mastery trainer. It presents words,
records whether the learner recalled them, and decides what to show next
and when:

1. Spaced repetition - Mastery-scaled review intervals per word
2. Adaptive difficulty - Word band follows recent accuracy and speed
3. Level tests - Generated questions with weak-area diagnostics

The 'lexicon' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="lexicon-trainer",
    version="1.0.0",
    description="Terminal vocabulary mastery trainer with spaced repetition",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Lexicon",
    packages=find_packages(include=["lexicon", "lexicon.*"]),
    py_modules=["config", "main"],
    package_data={"lexicon": ["data/*.json"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lexicon=lexicon.delivery.cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="vocabulary spaced-repetition cli education",
)

"""
Setup script for simulado-cli.

Simulado CLI is a terminal client for the simulado (practice exam)
service. It covers the whole exam flow:

1. Builder - pick question count, time limit and topics
2. Taker - answer with a countdown; answers sync in the background
3. Results & History - graded results, past exams, replication

The 'simulado' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="simulado-cli",
    version="1.0.0",
    description="Terminal client for simulado practice exams",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Simulado",
    packages=find_packages(include=["simulado", "simulado.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
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
            "simulado=simulado.cli.main:main",
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
        "Topic :: Education :: Testing",
    ],
    keywords="simulado exam practice cli education",
)

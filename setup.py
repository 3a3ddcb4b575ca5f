"""Setup configuration for memory-store"""
from setuptools import setup, find_packages

setup(
    name="memory-store",
    version="0.1.0",
    description="Keyed embedding storage with exact nearest-neighbour search",
    packages=find_packages(include=["memory_store", "memory_store.*"]),
    install_requires=[
        "click>=8.1.7",
        "python-dotenv>=1.0.0",
        "sqlalchemy[asyncio]>=2.0.25",
        "asyncpg>=0.29.0",
        "pydantic>=2.5.0",
        "numpy>=1.26.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "memory-store=memory_store.cli:cli",
        ],
    },
    python_requires=">=3.10",
)

# setup.py
from setuptools import setup, find_packages

setup(
    name="access_scout",
    version="0.1.0",
    description="Эвристическая оценка доступности сайтов AccessScout",
    packages=find_packages(exclude=["tests", "tests.*"]),  # автоматически найдёт папку access_scout
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "lxml>=4.9",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "click>=8.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "access-scout=access_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)

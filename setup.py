"""
Setup script for the headless-visitor project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="headless-visitor",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "playwright>=1.40",
        "httpx>=0.26",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "headless-visitor=visitor_service.__main__:main",
        ],
    },
)

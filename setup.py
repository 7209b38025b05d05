"""
Setup script for the APEX PDF service.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="apex-pdf-service",
    version="1.0.0",
    packages=find_packages(include=["apex_pdf_service", "apex_pdf_service.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "httpx>=0.27",
        "playwright>=1.40",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "apex-pdf-service=apex_pdf_service.__main__:main",
        ],
    },
)

"""
Setup script for the LoopMessage SDK
"""
from setuptools import setup, find_packages

setup(
    name="loopmessage-sdk",
    version="0.1.0",
    packages=find_packages(include=["loopmessage_sdk", "loopmessage_sdk.*"]),
    python_requires=">=3.9",
    install_requires=[
        "httpx>=0.27.0",
        "pydantic>=2.8.0",
        "python-dotenv>=1.0.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    description="LoopMessage SDK - async client for sending iMessage/SMS and handling webhooks",
    author="LoopMessage SDK Team",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)

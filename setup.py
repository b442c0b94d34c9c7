"""Setup file for the API Spec Search package."""

from setuptools import setup, find_packages

setup(
    name="api-spec-search",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click",
        "httpx",
        "numpy",
        "pydantic>=2",
        "python-dotenv",
        "pyyaml",
        "regex",
        "rich",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "api-spec-search=api_spec_search.__main__:main",
        ],
    },
    author="Pimentel",
    author_email="pimentel@example.com",
    description="Deterministic hybrid search over OpenAPI operations",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    url="https://github.com/pimentel/api-spec-search",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
)

"""
Setup script for the cf-battle-engine package.
"""

from setuptools import setup, find_packages

setup(
    name="cf-battle-engine",
    version="1.0.0",
    description="Match engine for timed multi-player Codeforces battles",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
        "requests>=2.31.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
        "dev": [
            "pytest>=7.4",
            "build",
            "wheel",
        ],
    },
    package_data={
        "cf_battle": ["_store/schema.sql"],
    },
    entry_points={
        "console_scripts": [
            "cf-battle=cf_battle.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)

from __future__ import annotations

from pathlib import Path

from setuptools import find_packages, setup

# Read README for long description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    # Package metadata
    name="perkq",
    version="0.1.0",
    author="Justin Koufopoulos",
    author_email="justin@example.com",  # Update this
    description="Turn credit-card offer screenshots into reviewable perk candidates",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/perkq",  # Update this
    # Package discovery
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"perkq.extraction": ["issuer_profiles.yaml"]},
    # Dependencies
    install_requires=[
        "pydantic>=2.5.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
    ],
    # Optional dependencies (for development)
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
            "ruff>=0.1.0",
        ],
    },
    # Python version requirement
    python_requires=">=3.11",
    # PyPI classifiers
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)

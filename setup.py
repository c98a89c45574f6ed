"""setuptools setup for PrecisionTimer.

Install for development:
    pip install -e ".[test]"
    pytest
"""

from setuptools import setup, find_packages

setup(
    name="PrecisionTimer",
    version="0.1.0",
    description="Drift-free interval timers and stopwatches for Qt applications.",
    packages=find_packages(include=["precisiontimer", "precisiontimer.*"]),
    python_requires=">=3.10",
    install_requires=["PyQt6"],
    extras_require={"test": ["pytest"]},
)

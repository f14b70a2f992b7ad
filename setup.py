from setuptools import setup, find_packages

setup(
    name="treasury_metrics",
    version="0.1.0",
    description="Accrued interest and dirty prices for U.S. Treasuries",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "treasury-metrics=treasury_metrics.cli:main",
        ],
    },
    python_requires=">=3.8",
)

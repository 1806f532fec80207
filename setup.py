# setup.py
from setuptools import setup, find_packages

setup(
    name="tenge-budget",
    version="0.1.0",
    description="A CLI for tracking income and expenses in tenge",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",
        "pyyaml>=5.3",
        "python-dotenv>=0.19",
        "xlsxwriter>=3.0",
        "mcp>=1.0,<2",
        "anyio>=3.0",
    ],
    extras_require={
        "tests": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "budget=budget_tracker.cli:main",
            "budget-mcp=budget_tracker.mcp_server:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

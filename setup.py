# setup.py
from setuptools import setup, find_packages

setup(
    name="finote",
    version="0.1.0",
    description="Personal finance tracker with recurring-payment detection and progressive tax estimates",
    author="Your Name",
    author_email="you@example.com",
    url="https://github.com/yourusername/finote",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click>=7.0",
        "pyyaml>=5.3",
        "pandas>=1.1",
        "python-dotenv>=0.19",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "finote=finote.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

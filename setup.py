"""
Setup script for the PRA relation prediction package.
"""

from setuptools import setup, find_packages

setup(
    name="pra_relation_prediction",
    version="1.0.0",
    description="Path Ranking relation prediction over knowledge graphs",
    author="PRA Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"config": ["*.yaml"]},
    python_requires=">=3.8",
    install_requires=[
        "torch>=2.0.0",
        "networkx>=3.0",
        "numpy>=1.23.0",
        "scipy>=1.10.0",
        "pyyaml>=6.0",
        "scikit-learn>=1.2.0",
        "tqdm>=4.65.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pra-run=scripts.run_relations:main",
            "pra-split=scripts.create_split:main",
        ],
    },
)

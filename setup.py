#!/usr/bin/env python3
"""Setup script for Defender Plan Auditor"""
from setuptools import setup, find_packages

setup(
    name="defender-plan-auditor",
    version="1.0.0",
    description="Audit Defender for Servers pricing plans across Azure subscriptions",
    author="Azure Cost Optimization Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "azure-core>=1.26.0",
        "azure-identity>=1.12.0",
        "azure-mgmt-resource>=21.0.0,<25",
        "azure-mgmt-subscription>=3.1.1",
        "requests>=2.28.0",
        "pyyaml>=6.0",
        "rich>=12.0.0",
        "typer>=0.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "defender-plan-auditor=defender_plan_auditor.cli.main:main",
        ],
    },
    python_requires=">=3.8",
)

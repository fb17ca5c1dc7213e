# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for smc-get, the SMC contributed content package manager
"""

from setuptools import setup, find_packages

setup(
    name="smc-get",
    version="0.4.0",
    description="Package manager for Secret Maryo Chronicles contributed levels, music and graphics",
    author="adcl.io",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "httpx>=0.25.0",
        "pydantic>=2.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ]
    },
)

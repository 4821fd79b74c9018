"""Setup configuration for teamcity_client"""

from setuptools import setup, find_packages

setup(
    name="teamcity-rest-client",
    version="0.1.0",
    description=(
        "Typed client for the TeamCity REST API: projects, build types, "
        "builds, changes, users, user groups and licensing data."
    ),
    author="TeamCity REST Client Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "teamcity-client=teamcity_client.main:main",
        ],
    },
)

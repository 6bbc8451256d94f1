"""Setup script for quickbuild."""

from pathlib import Path

from setuptools import find_packages, setup


def read_readme():
    """Long description from the README, if present."""
    readme = Path(__file__).parent / "README.md"
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="quickbuild-cli",
    version="0.1.0",
    description="Build, validate, run and integration-test single-file Velocitas vehicle apps",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    packages=find_packages(include=["quickbuild", "quickbuild.*"]),
    package_data={"quickbuild.templates": ["*.cpp"]},
    include_package_data=True,
    install_requires=[
        "blake3>=0.4",
        "click>=8.1",
        "dependency-injector>=4.41",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        'tomli>=2.0; python_version < "3.11"',
    ],
    extras_require={
        "test": ["pytest>=7.4"],
    },
    entry_points={
        "console_scripts": [
            "quickbuild=quickbuild.__main__:main",
        ],
    },
)

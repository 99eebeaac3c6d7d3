from setuptools import find_packages, setup

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name="swayless",
    version="0.1",
    description="Per-output workspaces for sway",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "orjson",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    python_requires=">=3.11",
    package_data={
        "swayless": ["settings.json"],
    },
    entry_points={
        "console_scripts": ["swayless=swayless.cli:main"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
    ],
)

import setuptools


with open('README.md', 'r') as fh:
    long_description = fh.read()

setuptools.setup(
    name="eventlog",
    version="0.1.0",
    description="Event log storage and query engine.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.8",
    classifiers=(
        "Programming Language :: Python :: 3",
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries",
        "Topic :: System :: Logging",
    ),
    install_requires=[
        "SQLAlchemy>=1.4",
        "PyYAML>=5.1",
        "pydantic>=2",
    ],
    extras_require={
        "tests": [
            "pytest",
        ],
    },
)

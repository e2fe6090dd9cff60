from setuptools import setup, find_packages

setup(
    name="gridquad",
    version="0.1.0",
    description="Adaptive grid-refining Simpson integration for Monte Carlo event generators",
    author="adamfilli",
    packages=find_packages(include=["gridquad", "gridquad.*"]),
    install_requires=[
        "matplotlib",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)

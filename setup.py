from setuptools import find_packages, setup

setup(
    name="hookable",
    version="0.1.0",
    description="Typed extension points with ordered taps, interceptors and lazily compiled invocation",
    packages=find_packages(include=["hookable", "hookable.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.6",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.4"],
    },
)

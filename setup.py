from setuptools import setup, find_packages

setup(
    name="leaklab",
    version="0.1.0",
    description="Memory leak pattern demo service with heap snapshot tooling",
    author="adamfilli",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi",
        "uvicorn",
        "psutil",
        "pandas",
        "matplotlib",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "leaklab=leaklab.__main__:main",
        ],
    },
    include_package_data=True,
    python_requires=">=3.11",
)

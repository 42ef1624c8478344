from setuptools import find_packages, setup

setup(
    name="zklogin",
    version="0.0.0",
    packages=find_packages(include=["zklogin", "zklogin.*"]),
    include_package_data=True,
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic",
        "cryptography",
        "requests",
        "click",
        "PyJWT[crypto]",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "zklogin=zklogin.cli:cli",
        ],
    },
)

# setup.py
from setuptools import setup, find_packages

setup(
    name="luastack",
    version="0.1.0",
    packages=find_packages(include=["luastack", "luastack.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    zip_safe=False,
)

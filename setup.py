# setup.py
from setuptools import setup, find_packages

setup(
    name="kappa-lisp",
    version="0.3.0",
    description="A small Lisp for driving Python libraries, with an explicit value bridge",
    packages=find_packages(include=["kappa", "kappa.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    zip_safe=False,
)

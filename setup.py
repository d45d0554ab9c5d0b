# setup.py
from setuptools import setup, find_packages

setup(
    name="quasi",
    version="0.1.0",
    description="Hygienic quote/unquote macro expansion for symbolic expressions",
    packages=find_packages(include=["quasi", "quasi.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    zip_safe=False,
)

import re

from setuptools import setup

with open("bitcointxlib/__init__.py") as init_file:
    __version__ = re.search(r'__version__ = "([^"]+)"', init_file.read()).group(1)

with open("README.rst") as readme:
    long_description = readme.read()

setup(
    name="bitcoin-txlib",
    version=__version__,
    description="Build and sign legacy, segwit and taproot Bitcoin transactions",
    long_description=long_description,
    author="The bitcoin-txlib developers",
    license="MIT",
    keywords="bitcoin transaction segwit taproot signing library",
    install_requires=[
        "base58check>=1.0.2,<2.0",
        "ecdsa>=0.18,<1.0",
        "coincurve>=18.0.0",
        "sympy>=1.2,<2.0",
        "python-bitcointx>=1.1.5,<1.2",
    ],
    extras_require={
        "test": ["pytest"],
    },
    packages=["bitcointxlib"],
    python_requires=">=3.9",
    zip_safe=False,
)

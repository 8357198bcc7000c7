from setuptools import setup, find_packages


setup(
    name="mcrp",
    version="0.1",
    packages=find_packages(),
    description="Folder encryption with per-file keys, an encrypted manifest and a detached master key.",
    author="mcrp contributors",
    install_requires=[
        "pycryptodomex>=3.23.0",
    ],
    entry_points={
        "console_scripts": [
            "mcrp=mcrp.cli:main",
        ]
    },
)

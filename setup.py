# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="navindex",
    version="1.0.0",
    description="Build, merge and serialize documentation navigation indexes",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["navindex*"]),
    package_data={
        "navindex.interface": ["locales/*.json"],
    },
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "requests",  # Remote artifacts for merging
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'navindex=navindex.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="storage-analysis",
    version="0.1.0",
    description="Concurrent directory size analyzer with colorized tree output",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["storage_analysis*"]),
    python_requires=">=3.9",
    install_requires=[
        "rich",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'storage-analysis=storage_analysis.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)

from __future__ import annotations

from setuptools import find_packages, setup  # type: ignore


setup(
    name="implindex",
    version="0.1.0",
    description="Per-trait implementors index with order-independent renderer hand-off",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "fastapi",
        "uvicorn",
        "httpx",
    ],
    extras_require={
        "test": ["pytest", "httpx"],
    },
    entry_points={
        "console_scripts": [
            "implindex=implindex.__main__:main",
        ],
    },
)

"""Setup pour DouanApp."""

from setuptools import setup, find_namespace_packages

setup(
    name="douanapp",
    version="1.0.0",
    description="Gestion de dossiers de dedouanement, factures a tranches et locations de camions",
    author="HSC",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["douanapp", "douanapp.*"]),
    entry_points={
        "console_scripts": [
            "douanapp=douanapp.main:main",
        ],
    },
    install_requires=[
        "openpyxl>=3.1.0",
        "reportlab>=4.0",
        "python-dateutil>=2.8.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pdfplumber>=0.10.0",
        ],
    },
)

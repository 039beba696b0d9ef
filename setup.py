#!/usr/bin/env python

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="dbarray",
    version="1.0.0",
    description="Shape relational query results into lists, dicts and records, with CSV/XML/XLSX export",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    license="GPLv2",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python",
        "Natural Language :: English",
        "License :: OSI Approved :: GNU General Public License v2 (GPLv2)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries"
    ],
    install_requires=[
        "mysql-connector-python>=8.0.0",
    ],
    extras_require={
        "mysql": ["mysql-connector-python>=8.0.0"],
        "mariadb": ["mariadb>=1.0.0"],
        "postgres": ["psycopg2-binary>=2.9.0"],
        "mssql": ["pyodbc>=4.0.0"],
        "oracle": ["oracledb>=1.0.0"],
        "xlsx": ["openpyxl>=3.0.0"],
        "test": ["pytest>=7.0.0", "openpyxl>=3.0.0"],
        "all": [
            "mysql-connector-python>=8.0.0",
            "mariadb>=1.0.0",
            "psycopg2-binary>=2.9.0",
            "pyodbc>=4.0.0",
            "oracledb>=1.0.0",
            "openpyxl>=3.0.0"
        ]
    },
    python_requires=">=3.9",
)

import os

from setuptools import setup

# Readme as long description
with open(os.path.join(os.path.dirname(__file__), "README.md")) as readme_file:
    long_description = readme_file.read()

setup(
    name="django-datepartition",
    version="1.0.0",
    include_package_data=True,
    packages=[
        "datepartition",
        "datepartition.management",
        "datepartition.management.commands",
    ],
    license="MIT",
    description="Date range partition maintenance for MySQL tables in Django",
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    install_requires=["Django>=4.2", "python-dateutil>=2.7.0"],
    extras_require={
        "mysql": ["mysqlclient>=2.2"],
        "test": ["freezegun", "pytest", "pytest-django"],
    },
    zip_safe=False,
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Framework :: Django",
        "Framework :: Django :: 4.2",
        "Framework :: Django :: 5.0",
        "Framework :: Django :: 5.1",
        "Framework :: Django :: 5.2",
        "License :: OSI Approved :: MIT License",
    ],
)

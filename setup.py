#!/usr/bin/env python
from setuptools import setup, find_packages

with open("README.md", "r", encoding='utf-8') as fh:
    long_description = fh.read()

setup(
    name="albroute",
    version="1.0.0",
    description="Routing rule and priority management for AWS application load balancers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords=['aws', 'elbv2', 'alb', 'load balancer', 'devops'],
    classifiers=[
       "Programming Language :: Python :: 3"
    ],
    packages=find_packages(),
    include_package_data=True,
    package_data={
        'albroute': ["py.typed"],
        'albroute.templates': ["*.jinja2"],
    },
    install_requires=[
        "boto3 >= 1.17",
        "cement>=3.0.0",
        "click >= 6.7",
        "colorlog",
        "jinja2 >= 2.11",
        "PyYAML >= 5.1",
        "tabulate >= 0.8.1",
    ],
    extras_require={
        'test': [
            "mock",
            "pytest",
            "testfixtures",
        ],
    },
    entry_points={'console_scripts': [
        'albroute = albroute.main:main',
        'alb = albroute.main:main'
    ]}
)

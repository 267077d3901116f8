#!/usr/bin/env python
# -*- coding: utf-8 -*-
import os

from setuptools import find_packages, setup

ROOT = os.path.dirname(os.path.abspath(__file__))

# There are problems running setup.py on Windows if the encoding is not set
with open(os.path.join(ROOT, 'README.md'), encoding='utf8') as readme_file:
    readme = readme_file.read()
with open(os.path.join(ROOT, 'gedata', 'VERSION'), encoding='utf8') as version_file:
    version = version_file.read().strip()


setup(
    name='gedata',
    version=version,
    description="Event tracking SDK with batched, retried delivery to the Gravity Engine collection API.",
    long_description=readme,
    long_description_content_type="text/markdown",
    author="gravity-engine.com",
    url='https://github.com/GravityInfinite/python-sdk',
    packages=find_packages(include=['gedata', 'gedata.*']),
    package_data={'gedata': ['VERSION']},
    entry_points={
        'console_scripts': [
            'gedata=gedata.cli:cli'
        ]
    },
    include_package_data=True,
    install_requires=[
        'click>=8.0',
        'httpx>=0.25',
        'pydantic>=2.0',
        'pydantic-core',
        'tenacity>=8.0',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    python_requires=">=3.8",
    license="MIT license",
    zip_safe=False,
    keywords='gedata analytics tracking',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ]
)

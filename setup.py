"""
siqpack - Quiz package normalizer and optimizer

Installation:
    pip install -e .

This installs the 'siqpack' command globally in your environment.
"""

from setuptools import setup, find_packages
import os

# Read README for long description
long_description = ''
if os.path.exists('README.md'):
    with open('README.md', 'r', encoding='utf-8') as f:
        long_description = f.read()

setup(
    name='siqpack',
    version='1.0.0',
    description='Normalize .siq quiz packages to JSON and shrink their media',
    long_description=long_description,
    long_description_content_type='text/markdown',
    license='MIT',

    # Find all packages (siqpack/ and its tests)
    packages=find_packages(exclude=['docs']),

    include_package_data=True,

    # Python version requirement
    python_requires='>=3.9',

    # Dependencies
    install_requires=[
        'click>=8.0',
        'PyYAML>=6.0',
        'lxml>=4.9',
        'Pillow>=10.0',
    ],

    # Optional dependencies
    extras_require={
        'dev': [
            'pytest>=7.4',
            'pytest-cov>=4.1',
        ],
    },

    # CLI entry point - this creates the 'siqpack' command
    entry_points={
        'console_scripts': [
            'siqpack=siqpack.cli:cli',
        ],
    },

    # Classifiers for PyPI
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: End Users/Desktop',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Games/Entertainment',
    ],

    # Keywords for discoverability
    keywords='sigame siq quiz package optimizer',
)

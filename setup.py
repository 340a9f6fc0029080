# -*- coding: utf-8 -*-

from setuptools import setup, find_packages

setup(
    name = 'skbnn',
    version = '0.1.0a1',
    description = "bayesian ridge regression and neural networks with scikit-learn api",
    license = 'MIT',
    packages = find_packages(exclude=['tests*']),
    python_requires = '>=3.8',
    install_requires = [
        'numpy>=1.17',
        'scipy>=1.3',
        'scikit-learn>=0.24',
    ],
    extras_require = {
        'test': [
            'pytest>=6.0',
            'coverage>=5.0',
        ],
    },
    classifiers = [
        'Development Status :: 3 - Alpha',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
    ],
)

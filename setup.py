"""
Setup script for the kmeans-hamerly package
"""

# Always prefer setuptools over distutils
from setuptools import setup, find_packages
# To use a consistent encoding
from codecs import open
from os import path

here = path.abspath(path.dirname(__file__))

# Get the long description from the relevant file
try:
    with open(path.join(here, 'README.md'), encoding='utf-8') as f:
        long_description = f.read()
        long_description_content_type = 'text/markdown'
except FileNotFoundError:
    long_description = 'K-means clustering accelerated with Hamerly\'s triangle inequality bounds'
    long_description_content_type = 'text/plain'

# Get the code version
version = {}
with open(path.join(here, "kmeans/version.py")) as fp:
    exec(fp.read(), version)
__version__ = version['__version__']
# now we have a `__version__` variable

setup(
    name='kmeans-hamerly',
    version=__version__,
    description='Exact k-means clustering accelerated with Hamerly\'s bounds',
    long_description=long_description,
    long_description_content_type=long_description_content_type,
    license='MIT',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Information Analysis',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
    keywords='kmeans clustering hamerly triangle-inequality machine-learning',
    packages=find_packages(include=['kmeans*']),
    python_requires='>=3.8',
    install_requires=[
        'numpy>=1.17',
        'scikit-learn>=0.24',  # kmeans_plusplus seeding
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
)

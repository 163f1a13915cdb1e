import os
import re

from setuptools import find_packages, setup


def get_version():
    with open(os.path.join(os.path.dirname(__file__), 'annoremap', '__init__.py')) as fh:
        return re.search(r"^__version__ = '([^']+)'", fh.read(), re.MULTILINE).group(1)


VERSION = get_version()


def parse_md_readme():
    try:
        with open('README.md') as fh:
            return fh.read()
    except OSError:
        return ''


TEST_REQS = [
    'coverage>=4.2',
    'pytest',
    'pytest-cov',
]


INSTALL_REQS = [
    'biopython>=1.70',
    'braceexpand>=0.1.2',
    'intervaltree>=3.0.0',
    'networkx>=2.0',
    'pandas>=1.0.0',
]

DEPLOY_REQS = ['twine', 'wheel']


setup(
    name='annoremap',
    version='{}'.format(VERSION),
    packages=find_packages(exclude=['tests', 'tests.*']),
    description='Remaps gene annotations between genome assemblies through alignment chains',
    long_description=parse_md_readme(),
    long_description_content_type='text/markdown',
    install_requires=INSTALL_REQS,
    extras_require={
        'test': TEST_REQS,
        'dev': ['black', 'flake8'] + TEST_REQS + DEPLOY_REQS,
        'deploy': DEPLOY_REQS,
    },
    tests_require=TEST_REQS,
    python_requires='>=3.6',
    test_suite='tests',
    entry_points={
        'console_scripts': [
            'annoremap = annoremap.main:main',
        ]
    },
)

import os

from setuptools import setup, find_packages

with open(os.path.join(os.path.dirname(__file__), "readme.md"), "r") as fh:
    long_description = fh.read()

setup(
    name='p2pvps-server',
    version='1.0.0',
    url='https://github.com/p2pvps/p2pvps-server',
    license='MIT',
    description='Payments and market listings for the P2P VPS device rental marketplace.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires='>=3.8',
    install_requires=[
        'aiohttp>=3.8',
        'uvloop',
        'aiobreaker>=1.1',
        'aiohttp-apispec',
        'aiohttp-cors',
        'tortoise-orm>=0.19',
        'marshmallow>=3,<4',
        'marshmallow-jsonschema',
        'python-jose',
        'passlib',
        'sentry-sdk',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-aiohttp>=1.0',
            'pytest-asyncio',
            'faker',
        ],
    },
    entry_points={
        'console_scripts': ['p2pvps=p2pvps.cli:run'],
    },
)

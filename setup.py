import os

from setuptools import setup, find_packages

with open(os.path.join(os.path.dirname(__file__), "readme.md"), "r") as fh:
    long_description = fh.read()

setup(
    name='gamespot-kiosk',
    version='1.0.0',
    license='MIT',
    description='Console booking, payment and power control API for the gaming kiosk.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires='>=3.8',
    install_requires=[
        'aiohttp',
        'aiohttp-cors',
        'aiohttp-apispec',
        'aiobreaker',
        'marshmallow>=3,<4',
        'marshmallow-jsonschema',
        'tortoise-orm>=0.20',
        'aiosqlite',
        'uvloop',
        'sentry-sdk',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-aiohttp',
            'pytest-asyncio',
            'pytest-mock',
            'faker',
        ],
    },
    entry_points={
        'console_scripts': ['gamespot=gamespot.cli:run'],
    },
)

"""Install the CoreShop identity store package."""

from setuptools import setup, find_packages

setup(
    name='coreshop-identity',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    python_requires='>=3.11',
    install_requires=[
        "sqlalchemy[asyncio]>=2.0",
        "aiosqlite",
        "python-json-logger>=3.1",
        "pytz",
        "mimesis"
    ],
    extras_require={
        "mysql": ["aiomysql"],
        "test": [
            "pytest",
            "pytest-asyncio",
            "hypothesis"
        ]
    },
    zip_safe=False
)

"""Install the pioj identity and sequencing service."""

from setuptools import setup, find_packages

setup(
    name='pioj',
    version='0.1.0',
    packages=find_packages(include=['pioj', 'pioj.*'],
                           exclude=['*.tests', '*.tests.*']),
    install_requires=[
        "flask>=2.2",
        "werkzeug",
        "sqlalchemy>=1.4",
        "redis>=4.0",
        "fakeredis>=2.0",
        "wtforms>=3.0",
        "email-validator",
        "retry",
        "python-json-logger",
        "pytz"
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis"
        ]
    },
    zip_safe=False
)

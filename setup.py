"""Install the LoginRadius storefront bridge."""

from setuptools import setup, find_packages

setup(
    name='loginradius-bridge',
    version='0.3',
    packages=find_packages(exclude=['tests*']),
    package_data={'loginradius_bridge': ['config.py']},
    install_requires=[
        "flask",
        "flask-sqlalchemy>=3",
        "sqlalchemy>=2",
        "requests",
        "wtforms",
        "retry",
        "pytz",
        "python-json-logger",
    ],
    extras_require={
        'test': ["pytest", "jsonschema"],
    },
    zip_safe=False
)

from setuptools import setup, find_packages
import re

# Read version from pilotpay/__init__.py
with open('pilotpay/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='pilot-pay',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'pilotpay': ['data/*.yaml', 'data/tax_rules/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'pilot-pay=pilotpay.cli.__main__:main',
            'pilot-pay-mcp=pilotpay.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Airline pilot contract pay, deductions and VO estimates.',
    python_requires='>=3.10',
)

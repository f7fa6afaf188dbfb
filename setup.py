from setuptools import setup, find_packages
import re

# Read version from otcalc/__init__.py
with open('otcalc/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='ot-calc',
    version=version,
    packages=find_packages(include=['otcalc', 'otcalc.*']),
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
            'ot-calc=otcalc.cli.__main__:main',
            'ot-calc-mcp=otcalc.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Overtime and allowance pay tracker for a single fiscal year.',
    python_requires='>=3.10',
)

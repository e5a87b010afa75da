"""
Setup script for Terminal Session Client.

A Python client for driving sessions on a remote terminal-hosting server.
Creates, renames, feeds and terminates sessions and keeps a polled session list.
"""

from setuptools import setup, find_packages
import os
import re

# Get version from __init__.py
def get_version():
    init_path = os.path.join(os.path.dirname(__file__), 'terminal_session_client', '__init__.py')
    if os.path.exists(init_path):
        with open(init_path, 'r', encoding='utf-8') as f:
            content = f.read()
            version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", content, re.M)
            if version_match:
                return version_match.group(1)
    return "0.1.0"

# Read the README file for long description
def read_readme():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return "Terminal Session Client - drive sessions on a remote terminal-hosting server."

# Read requirements from requirements.txt, filtering out dev dependencies
def read_requirements():
    requirements_path = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    requirements = []
    dev_packages = {'pytest', 'pytest-asyncio', 'pytest-mock', 'pytest-cov'}

    if os.path.exists(requirements_path):
        with open(requirements_path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    # Skip dev dependencies for main install
                    if not any(dev_pkg in line.lower() for dev_pkg in dev_packages):
                        requirements.append(line)
    if not requirements:
        requirements = ["aiohttp>=3.9.0", "yarl>=1.9.0", "PyYAML>=6.0.1", "tabulate>=0.9.0"]
    return requirements

setup(
    name="terminal-session-client",
    version=get_version(),
    author="Terminal Session Client Team",
    description="Client-side session lifecycle coordinator for terminal-hosting servers",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "docs", "examples"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Terminals",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Environment :: Console",
        "Framework :: AsyncIO",
        "Framework :: aiohttp",
    ],
    python_requires=">=3.9",
    install_requires=read_requirements(),
    extras_require={
        "dev": [
            "pytest>=8.2.2",
            "pytest-asyncio>=0.23.7",
            "pytest-mock>=3.14.0",
            "pytest-cov>=5.0.0",
            "types-PyYAML",
            "types-tabulate",
        ],
    },
    entry_points={
        "console_scripts": [
            "terminal-session-client=terminal_session_client.cli:main",
        ],
    },
    zip_safe=False,
    keywords="terminal pty session remote aiohttp client",
)

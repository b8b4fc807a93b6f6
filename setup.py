#!/usr/bin/env python

import setuptools

setuptools.setup(
    name="wxreader",
    version="0.3.0",
    description="Keyboard navigation, ink screen and compact modes for the WeRead web reader.",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    package_data={"wxreader": ["configs/*.yaml"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        "qtpy>=2.0",
        "PyQt5>=5.15",
        "PyQtWebEngine>=5.15",
        "PyYAML>=5.3",
        "termcolor>=1.1.0",
        'colorama>=0.4; platform_system=="Windows"',
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    python_requires=">=3.10",
    entry_points={
        "console_scripts": [
            "wxreader = wxreader.gui.app:main",
        ],
    },
)

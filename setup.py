# SPDX-License-Identifier: GPL-3.0-or-later
from setuptools import setup, find_namespace_packages


def get_description():
    return "Delete the leftovers of a CAPVCD cluster from VMware Cloud Director"


def get_long_description():
    with open("README.md") as f:
        text = f.read()

    # Long description is everything after README's initial heading
    idx = text.find("\n\n")
    return text[idx:]


def get_requirements(filename="requirements.txt"):
    with open(filename) as f:
        return [line for line in f.read().splitlines() if line and not line.startswith("#")]


setup(
    name="capvcd-cleanup",
    version="1.0.0",
    packages=find_namespace_packages(where="src"),
    package_dir={"": "src"},
    license="GPLv3+",
    description=get_description(),
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        "Topic :: System :: Systems Administration",
    ],
    python_requires=">=3.8",
    install_requires=get_requirements(),
    extras_require={"test": get_requirements("test-requirements.txt")},
    entry_points={
        "console_scripts": [
            "capvcd-cleanup = capvcd_cleanup.tasks.cleanup:entry_point",
        ]
    },
    zip_safe=False,
)

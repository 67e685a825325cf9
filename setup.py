from pathlib import Path

from setuptools import find_packages, setup


def read_requirements(path):
    return list(Path(path).read_text().splitlines())


base_reqs = read_requirements("requirements/core.txt")
dev_reqs = read_requirements("requirements/dev.txt")

with open("README.md") as fh:
    LONG_DESCRIPTION = fh.read()


setup(
    name="dynwarp",
    version="0.1.0",
    description="Dynamic warping of 1-D sequences with bounded strain, and recursive exponential smoothing.",
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    license="Apache License 2.0",
    packages=find_packages(exclude=["*.tests", "*.tests.*"]),
    install_requires=base_reqs,
    extras_require={"dev": dev_reqs},
    package_data={
        "dynwarp": ["py.typed"],
    },
    zip_safe=False,
    python_requires=">=3.9",
    classifiers=[
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "Programming Language :: Python",
        "Topic :: Software Development",
        "Topic :: Scientific/Engineering",
        "Operating System :: POSIX",
        "Operating System :: Unix",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    keywords="dynamic time warping alignment smoothing",
)

"""Install ``swfini``."""

import pathlib
import setuptools

parent = pathlib.Path(__file__).parent
long_description = (parent / "README.md").read_text()
version = (parent / "VERSION").read_text().strip()

setuptools.setup(
    name="swfini",
    version=version,
    license="MIT",
    description="Run AWS Simple Workflow Service activity and decision workers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3 :: Only",
        "Natural Language :: English",
        "Operating System :: POSIX :: Linux",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: MacOS",
        "License :: OSI Approved :: MIT License"],
    keywords="aws swf simple workflow worker activity decision",
    packages=setuptools.find_packages(where="src"),
    package_dir={"": "src"},
    python_requires="~=3.8",
    install_requires=["boto3"],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "pytest-timeout",
            "sphinx",
            "sphinx_rtd_theme"]})

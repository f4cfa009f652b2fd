from setuptools import find_packages, setup

setup(
    name="codebak",
    version="0.3.0",
    description="Incremental project backups with zip archives, manifests and safe recovery",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["codebak=codebak.main:main"]},
)

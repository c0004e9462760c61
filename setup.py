from setuptools import setup, find_packages

setup(
    name="sitecms",
    version="0.1.0",
    description="Section content store and cached content coordinator for the corporate site",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "PyYAML>=6.0",
        "requests>=2.31.0",
        "Flask>=3.0",
        "Flask-SQLAlchemy>=3.1",
        "Flask-Migrate>=4.0",
        "Flask-Cors>=4.0",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "black>=23.0.0",
            "pylint>=2.17.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "sitecms=sitecms.cli:main",
        ]
    },
)

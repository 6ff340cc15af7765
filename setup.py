from setuptools import find_packages, setup

setup(
    name="featscale",
    version="0.3.0",
    description="Feature scaling and normalization CLI for ML preprocessing.",
    author="Araray Velho",
    author_email="araray@gmail.com",
    packages=find_packages(include=["featscale", "featscale.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "scipy",
        "pandas",
        "scikit-learn",
        "joblib",
        "matplotlib",
        "click",
        "tabulate",
        "rich",
        "toml",
        "pydantic>=2",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "featscale=featscale.cli.main:cli",
        ],
    },
)

from setuptools import setup, find_packages

setup(
    name="medtrack-analytics",
    version="1.0.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "pandas>=2.1.0",
        "numpy>=1.26.0",
        "sqlalchemy>=2.0.19",
        "psycopg2-binary>=2.9.6",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": ["pytest>=8.0.0"],
    },
    entry_points={
        "console_scripts": [
            "medtrack-analytics=medtrack_analytics.scripts.run_analytics:main",
        ],
    },
    python_requires=">=3.10",
)

from setuptools import setup, find_packages

setup(
    name="evolstm",
    version="0.1.0",
    packages=find_packages(include=["evolstm", "evolstm.*"]),
    install_requires=[
        # System
        'python-dotenv',

        # Data Handling
        'numpy',
        'pandas',

        # Machine Learning
        'scikit-learn',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
            'pytest-asyncio>=0.21.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'evolstm = evolstm.cli.evolstm:main',
        ],
    },
    include_package_data=True,
    description="Neuroevolved LSTM time-series forecaster",
)

from setuptools import setup, find_packages


setup(
    name='turbgen',
    version='1.0.0',
    author='Sijie Huang',
    description="Ornstein-Uhlenbeck turbulence generator for driving and initializing turbulence in hydrodynamics codes",
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.10',
    install_requires=[
        'numpy',
        'numba',
        'h5py',
        'rich',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['turbgen=turbgen.__main__:main'],
    },
)

from setuptools import setup, find_packages


def readme():
    with open('README.md') as f:
        return f.read()


setup(
    name='nycnoise',
    version='0.0',
    description='Test NYC noise complaint locations for spatial clustering',
    long_description=readme(),
    long_description_content_type='text/markdown',
    license='Apache 2.0',
    packages=find_packages(exclude=['tests']),
    python_requires='>=3.9',
    install_requires=[
        'numpy>=1.25',
        'scipy',
        'pandas>=2.0',
        'scikit-learn',
        'matplotlib',
        'shapely>=2.0',
        'geopandas',
        'pyproj',
        'joblib',
    ],
    extras_require={
        'test': ['pytest'],
    },
)

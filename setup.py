from setuptools import setup, find_packages


setup(
    name='aquasuit',
    version='0.1.0',
    packages=find_packages(),
    license='BSD 2-Clause',
    description='A geospatial package to estimate marine aquaculture suitability per maritime zone',
    python_requires='>=3.9',
    install_requires=[
        'rasterio>=1.3',
        'affine>=2.3,<3',
        'numpy>=1.20',
        'xarray>=0.18',
        'netCDF4>=1.5.6',
        'scipy>=1.6',
        'pandas>=1.1',
        'geopandas>=0.12',
        'shapely>=2.0',
        'pyproj>=3.0'
    ],
    package_data={'aquasuit': ['data/*.csv']},
    include_package_data=True
)

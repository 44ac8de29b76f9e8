import logging
import warnings

import numpy as np
import xarray as xr

from aquasuit.grid import Grid, Raster, check_same_grid


# offset between Kelvin and degrees Celsius
KELVIN_OFFSET = 273.15


def reduce_mean(rasters, skip_missing: bool = True) -> Raster:

    """
    Collapse an ordered sequence of same-grid rasters into their per-cell mean.

    Parameters:
        :param rasters:                     rasters sharing one grid, e.g. one per year
        :type rasters:                      sequence of Raster

        :param skip_missing:                exclude NoData cells from the mean; a cell is NoData in the output
                                            only when every input is NoData there.  When False any NoData input
                                            makes the output cell NoData.
        :type skip_missing:                 bool

        :return:                            mean raster on the shared grid
    """

    rasters = list(rasters)

    if len(rasters) == 0:
        raise ValueError("Cannot reduce an empty raster sequence")

    grid = check_same_grid(*rasters)

    stack = xr.DataArray(np.stack([r.values for r in rasters]), dims=('time', 'y', 'x'))

    # all-NaN cells legitimately produce NaN
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', category=RuntimeWarning)
        mean = stack.mean('time', skipna=skip_missing)

    return Raster(mean.values, grid)


def map_values(raster: Raster, func) -> Raster:
    """Apply an elementwise function to a raster, returning a new raster on the same grid."""

    return Raster(func(raster.values), raster.grid)


def kelvin_to_celsius(raster: Raster) -> Raster:
    """Convert a temperature raster from Kelvin to degrees Celsius."""

    return map_values(raster, lambda v: v - KELVIN_OFFSET)


def _find_coord(da, candidates):

    for name in candidates:
        if name in da.dims:
            return name

    raise KeyError(f"None of the coordinates {candidates} found in dimensions {da.dims}")


def read_sst_netcdf(nc_file, varname='analysed_sst', epsg='4326'):
    """Read a sea surface temperature NetCDF file and compute the yearly mean for each year it contains.

    Values are returned in the file's units; NaN marks land or missing cells.

    :param nc_file:                     Full path with file name and extension to the input NetCDF file
    :type nc_file:                      str

    :param varname:                     Variable name for SST in the NetCDF file
    :type varname:                      str

    :param epsg:                        EPSG number of the coordinate reference system for the input
                                        NetCDF file
                                        Default: 4326 which is WGS84
    :type epsg:                         str

    :return:                            list of Raster, one per year in time order

    """

    with xr.open_dataset(nc_file) as ds:

        da = ds[varname]

        lat_name = _find_coord(da, ('lat', 'latitude', 'y'))
        lon_name = _find_coord(da, ('lon', 'longitude', 'x'))

        # daily or monthly data to yearly mean
        yearly = da.resample(time='YS').mean('time').transpose('time', lat_name, lon_name)

        # north-up rows and west-to-east columns whatever order the file stores
        yearly = yearly.sortby(lon_name).sortby(lat_name, ascending=False).load()

    lats = yearly[lat_name].values
    lons = yearly[lon_name].values

    grid = Grid.from_coords(lons, lats, crs=f"EPSG:{epsg}")

    rasters = [Raster(yearly.isel(time=i).values, grid) for i in range(yearly.sizes['time'])]

    logging.info(f"Read {len(rasters)} yearly SST layers from {nc_file}")

    return rasters

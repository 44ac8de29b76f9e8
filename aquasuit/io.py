import logging

import geopandas as gpd
import numpy as np
import rasterio

from aquasuit.grid import Grid, Raster


def read_raster(raster_file, band=1) -> Raster:
    """Read one band of a raster file, replacing the file's nodata value with NaN.

    :param raster_file:                     Full path with file name and extension to the input raster file
    :type raster_file:                      str

    :param band:                            Band number to read
    :type band:                             int

    :return:                                Raster

    """

    with rasterio.open(raster_file) as src:

        arr = src.read(band).astype(np.float64)
        grid = Grid.from_transform(src.transform, src.shape, src.crs)

        if src.nodata is not None and not np.isnan(src.nodata):
            arr = np.where(arr == src.nodata, np.nan, arr)

    return Raster(arr, grid)


def read_raster_stack(raster_files):
    """Read the first band of each raster file in order."""

    return [read_raster(f) for f in raster_files]


def read_zones(zones_file):
    """Read a zone polygon layer (e.g. a shapefile of EEZ regions)."""

    return gpd.read_file(zones_file)


def write_raster(raster, output_raster):
    """Write a raster to a single band GeoTIFF with NaN as nodata."""

    metadata = {'driver': 'GTiff',
                'dtype': 'float32',
                'count': 1,
                'height': raster.grid.n_rows,
                'width': raster.grid.n_cols,
                'crs': raster.grid.crs,
                'transform': raster.grid.transform,
                'nodata': np.nan}

    logging.info(f"Writing raster file: {output_raster}")

    with rasterio.open(output_raster, 'w', **metadata) as dst:
        dst.write_band(1, raster.values.astype(np.float32))


def write_result(df, output_csv):
    """Write a zone suitability table to CSV."""

    logging.info(f"Writing zone suitability table: {output_csv}")

    df.to_csv(output_csv, index=False)

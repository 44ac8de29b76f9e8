import logging

import numpy as np
from rasterio.crs import CRS
from rasterio.enums import Resampling
from rasterio.features import rasterize
from rasterio.warp import reproject, transform_bounds
from shapely.geometry import mapping

from aquasuit.exceptions import GridMismatchError
from aquasuit.grid import Raster, ZoneRaster


def _bounds_intersect(a, b) -> bool:

    a_left, a_bottom, a_right, a_top = a
    b_left, b_bottom, b_right, b_top = b

    return a_left < b_right and b_left < a_right and a_bottom < b_top and b_bottom < a_top


def resample(source: Raster, target_grid, method: str = 'nearest') -> Raster:

    """
    Align a raster onto a target grid by nearest-neighbor sampling, cropping to the target extent.

    Target cells outside the source extent are NoData.  Values are never interpolated so that
    the source cell values carry through unchanged.

    Parameters:
        :param source:                      raster to align
        :type source:                       Raster

        :param target_grid:                 grid to sample onto
        :type target_grid:                  Grid

        :param method:                      resampling method; only 'nearest' is supported
        :type method:                       str

        :return:                            new raster on `target_grid`
    """

    if method != 'nearest':
        raise ValueError(f"Unsupported resampling method '{method}'; only 'nearest' is available")

    if source.grid.matches(target_grid):
        return Raster(source.values, target_grid)

    source_bounds = transform_bounds(source.grid.crs, target_grid.crs, *source.grid.bounds)

    if not _bounds_intersect(source_bounds, target_grid.bounds):
        raise GridMismatchError(f"Source extent {source_bounds} does not overlap target extent {target_grid.bounds}")

    destination = np.full(target_grid.shape, np.nan, dtype=np.float64)

    reproject(source=np.array(source.values),
              destination=destination,
              src_transform=source.grid.transform,
              src_crs=source.grid.crs,
              src_nodata=np.nan,
              dst_transform=target_grid.transform,
              dst_crs=target_grid.crs,
              dst_nodata=np.nan,
              resampling=Resampling.nearest)

    return Raster(destination, target_grid)


def rasterize_zones(zones, grid, attribute: str = 'rgn') -> ZoneRaster:

    """
    Burn zone polygons into a raster of zone ids aligned to `grid`.

    A cell takes the zone whose polygon contains the cell centre.  Where polygons overlap, the
    first polygon in input order wins.

    Parameters:
        :param zones:                       zone polygons with a unique id column
        :type zones:                        geopandas.GeoDataFrame

        :param grid:                        grid to rasterize onto
        :type grid:                         Grid

        :param attribute:                   name of the zone id column
        :type attribute:                    str

        :return:                            ZoneRaster on `grid`
    """

    if attribute not in zones.columns:
        raise KeyError(f"Zone id column '{attribute}' not found in zone layer")

    zone_ids = [str(i) for i in zones[attribute]]

    if len(set(zone_ids)) != len(zone_ids):
        raise ValueError(f"Zone id column '{attribute}' contains duplicate values")

    if zones.crs is not None and CRS.from_wkt(zones.crs.to_wkt()) != grid.crs:
        logging.info(f"Reprojecting zone layer to grid CRS {grid.crs}")
        zones = zones.to_crs(grid.crs.to_wkt())

    # burn values are code + 1 so that 0 can be the fill value
    shapes = [(mapping(geom), code + 1)
              for code, geom in enumerate(zones.geometry)
              if geom is not None and not geom.is_empty]

    if len(shapes) == 0:
        logging.warning("Zone layer has no usable geometries; every cell is NoData")
        return ZoneRaster(np.full(grid.shape, ZoneRaster.NODATA), zone_ids, grid)

    # later shapes overwrite earlier ones, so burn in reverse to let the first polygon win
    burned = rasterize(list(reversed(shapes)),
                       out_shape=grid.shape,
                       transform=grid.transform,
                       fill=0,
                       all_touched=False,
                       dtype=np.int32)

    return ZoneRaster(burned - 1, zone_ids, grid)

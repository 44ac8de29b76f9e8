import logging

import numpy as np
import pandas as pd
from pyproj import Geod
from scipy import ndimage

from aquasuit.exceptions import UnknownZoneError
from aquasuit.grid import check_same_grid


# square metres per square kilometre
SQM_PER_SQKM = 1.0e6


def geodesic_row_areas_km2(grid) -> np.ndarray:

    """
    Area of one cell in each row of a geographic (lon/lat) grid on the WGS84 ellipsoid.

    A degree of longitude spans less distance away from the equator, so cell area shrinks
    with latitude while staying constant along a row.

    Parameters:
        :param grid:                        geographic grid
        :type grid:                         Grid

        :return:                            1D array of cell areas (sqkm), one per row from north to south
    """

    geod = Geod(ellps='WGS84')

    left = grid.origin[0]
    right = left + grid.cell_width

    areas = np.zeros(grid.n_rows)

    for i, lat in enumerate(grid.y_centres()):

        lat_top = lat + grid.cell_height / 2.0
        lat_bottom = lat - grid.cell_height / 2.0

        lons = [left, right, right, left, left]
        lats = [lat_bottom, lat_bottom, lat_top, lat_top, lat_bottom]

        area_m2, _ = geod.polygon_area_perimeter(lons, lats)
        areas[i] = abs(area_m2) / SQM_PER_SQKM

    return areas


def cell_areas_km2(grid, cell_area_km2=None) -> np.ndarray:

    """
    Per-cell area of a grid in sqkm.

    Parameters:
        :param grid:                        grid to measure
        :type grid:                         Grid

        :param cell_area_km2:               None to derive the area from the grid CRS; a number for a constant
                                            area per cell; or a function of the 1D array of row centre
                                            y-coordinates (latitudes for geographic grids) returning the
                                            area of a cell in each row
        :type cell_area_km2:                None; float; callable

        :return:                            2D array of cell areas (sqkm) shaped like the grid
    """

    if cell_area_km2 is None:

        if grid.crs.is_geographic:
            row_areas = geodesic_row_areas_km2(grid)

        else:
            _, unit_factor = grid.crs.linear_units_factor
            cell_area_m2 = grid.cell_width * grid.cell_height * unit_factor ** 2

            return np.full(grid.shape, cell_area_m2 / SQM_PER_SQKM)

    elif callable(cell_area_km2):
        row_areas = np.asarray(cell_area_km2(grid.y_centres()), dtype=np.float64)

    else:
        return np.full(grid.shape, float(cell_area_km2))

    if row_areas.ndim == 1:
        row_areas = row_areas[:, np.newaxis]

    return np.broadcast_to(row_areas, grid.shape).astype(np.float64)


def aggregate(value_raster, zone_raster, cell_area_km2=None) -> dict:

    """
    Sum suitable area per zone.

    Every zone covering at least one cell gets an entry; zones without suitable cells map to 0.0.

    Parameters:
        :param value_raster:                binary suitability raster
        :type value_raster:                 SuitabilityRaster

        :param zone_raster:                 zone raster on the same grid
        :type zone_raster:                  ZoneRaster

        :param cell_area_km2:               per-cell area option, see `cell_areas_km2`
        :type cell_area_km2:                None; float; callable

        :return:                            dictionary of zone id to suitable area (sqkm)
    """

    grid = check_same_grid(value_raster, zone_raster)

    areas = cell_areas_km2(grid, cell_area_km2)
    suitable_area = np.where(value_raster.values == 1.0, areas, 0.0)

    # shift so that cells outside every zone carry label 0
    labels = zone_raster.codes + 1
    present = np.unique(labels[labels > 0])

    if present.size == 0:
        logging.warning("Zone raster covers no cells; no zonal areas computed")
        return {}

    sums = ndimage.sum_labels(suitable_area, labels=labels, index=present)

    return {zone_raster.zone_ids[label - 1]: float(total) for label, total in zip(present, sums)}


def build_result_table(areas: dict,
                       zone_polygons,
                       zone_field: str = 'rgn',
                       area_field: str = 'area_km2',
                       strict: bool = False) -> pd.DataFrame:

    """
    Join per-zone suitable area onto the zone attribute table and compute percent coverage.

    Zones missing from `areas` get a suitable area of 0.  Zones in `areas` without an attribute
    row get a NaN percentage, or raise UnknownZoneError when `strict` is set.

    Parameters:
        :param areas:                       zone id to suitable area (sqkm) from `aggregate`
        :type areas:                        dict

        :param zone_polygons:               zone attribute table
        :type zone_polygons:                pandas.DataFrame; geopandas.GeoDataFrame

        :param zone_field:                  name of the zone id column
        :type zone_field:                   str

        :param area_field:                  name of the total zone area (sqkm) column
        :type area_field:                   str

        :param strict:                      raise on zones without attributes instead of emitting NaN
        :type strict:                       bool

        :return:                            DataFrame with zone_id, total_area_km2, suitable_area_km2, and
                                            percent_suitable_area
    """

    attributes = pd.DataFrame({'zone_id': zone_polygons[zone_field].astype(str).values,
                               'total_area_km2': pd.to_numeric(zone_polygons[area_field],
                                                               errors='coerce').values})

    suitable = pd.DataFrame({'zone_id': pd.Series(list(areas.keys()), dtype=object),
                             'suitable_area_km2': pd.Series(list(areas.values()), dtype=np.float64)})

    unknown = sorted(set(suitable['zone_id']) - set(attributes['zone_id']))

    if unknown:

        msg = f"Zones without attribute rows: {unknown}"

        if strict:
            logging.error(msg)
            raise UnknownZoneError(msg)

        logging.warning(f"{msg}; their percent suitable area is NA")

    df = attributes.merge(suitable, on='zone_id', how='outer', sort=False)

    # keep attribute order, unknown zones last
    order = {zone_id: i for i, zone_id in enumerate(list(attributes['zone_id']) + unknown)}
    df = df.sort_values('zone_id', key=lambda s: s.map(order)).reset_index(drop=True)

    df['suitable_area_km2'] = df['suitable_area_km2'].fillna(0.0)

    total = df['total_area_km2'].where(df['total_area_km2'] > 0)
    df['percent_suitable_area'] = 100.0 * df['suitable_area_km2'] / total

    return df[['zone_id', 'total_area_km2', 'suitable_area_km2', 'percent_suitable_area']]

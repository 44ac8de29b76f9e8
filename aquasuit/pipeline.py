import os
import logging
from importlib import resources

import pandas as pd

from aquasuit import io
from aquasuit.climate import kelvin_to_celsius, read_sst_netcdf, reduce_mean
from aquasuit.grid import check_same_grid
from aquasuit.logger import Logger
from aquasuit.spatial import rasterize_zones, resample
from aquasuit.suitability import classify_range, combine, validate_range
from aquasuit.zonal import aggregate, build_result_table


class SuitabilityPipeline:
    """Evaluate aquaculture suitability per zone for any number of species on fixed zones.

    The zone raster is rasterized once on construction and reused by every call to `run`.

    :param grid:                                        Reference grid, normally that of the SST layers
    :type grid:                                         Grid

    :param zone_polygons:                               Zone polygons with id and total area columns
    :type zone_polygons:                                geopandas.GeoDataFrame

    :param zone_raster:                                 Optional precomputed zone raster on `grid`
    :type zone_raster:                                  ZoneRaster

    :param zone_field:                                  Name of the zone id column
                                                        Default: 'rgn'
    :type zone_field:                                   str

    :param area_field:                                  Name of the total zone area (sqkm) column
                                                        Default: 'area_km2'
    :type area_field:                                   str

    :param sst_in_kelvin:                               Convert the SST layers from Kelvin to Celsius
                                                        Default: True
    :type sst_in_kelvin:                                bool

    :param cell_area_km2:                               Per-cell area option passed to the zonal aggregation;
                                                        None derives it from the grid CRS
    :type cell_area_km2:                                None; float; callable

    :param strict:                                      Raise UnknownZoneError for zones without attributes
                                                        Default: False
    :type strict:                                       bool

    """

    def __init__(self, grid, zone_polygons, zone_raster=None, zone_field='rgn', area_field='area_km2',
                 sst_in_kelvin=True, cell_area_km2=None, strict=False):

        self.grid = grid
        self.zone_polygons = zone_polygons
        self.zone_field = zone_field
        self.area_field = area_field
        self.sst_in_kelvin = sst_in_kelvin
        self.cell_area_km2 = cell_area_km2
        self.strict = strict

        if zone_raster is None:
            logging.info(f"Rasterizing {len(zone_polygons)} zones on the reference grid")
            zone_raster = rasterize_zones(zone_polygons, grid, attribute=zone_field)

        else:
            check_same_grid(grid, zone_raster)

        self.zone_raster = zone_raster

    def suitability_raster(self, sst_stack, depth_raster, sst_range, depth_range):
        """Combined SST and depth suitability mask on the reference grid."""

        validate_range(*sst_range)
        validate_range(*depth_range)

        sst_stack = list(sst_stack)
        check_same_grid(self.grid, *sst_stack)

        logging.info(f"Computing mean SST over {len(sst_stack)} layers")
        mean_sst = reduce_mean(sst_stack, skip_missing=True)

        if self.sst_in_kelvin:
            mean_sst = kelvin_to_celsius(mean_sst)

        logging.info("Resampling depth onto the SST grid")
        depth = resample(depth_raster, self.grid)

        sst_suitable = classify_range(mean_sst, *sst_range)
        depth_suitable = classify_range(depth, *depth_range)

        suitable = combine([sst_suitable, depth_suitable])

        logging.info(f"Suitable cells: {suitable.count()} of {self.grid.n_rows * self.grid.n_cols}")

        return suitable

    def run(self, sst_stack, depth_raster, sst_range, depth_range):
        """Per-zone suitable area table for one species' SST and depth ranges."""

        suitable = self.suitability_raster(sst_stack, depth_raster, sst_range, depth_range)

        areas = aggregate(suitable, self.zone_raster, cell_area_km2=self.cell_area_km2)

        return build_result_table(areas, self.zone_polygons, zone_field=self.zone_field,
                                  area_field=self.area_field, strict=self.strict)


def run(sst_stack, depth_raster, zone_polygons, sst_range, depth_range, zone_raster=None, zone_field='rgn',
        area_field='area_km2', sst_in_kelvin=True, cell_area_km2=None, strict=False) -> pd.DataFrame:

    """
    Compute suitable area per zone from an SST stack and a depth raster.

    Parameters:
        :param sst_stack:                   SST rasters sharing one grid; the first defines the reference grid
        :type sst_stack:                    sequence of Raster

        :param depth_raster:                bathymetry raster (m, negative below sea level)
        :type depth_raster:                 Raster

        :param zone_polygons:               zone polygons with id and total area columns
        :type zone_polygons:                geopandas.GeoDataFrame

        :param sst_range:                   (low, high) suitable SST (deg C)
        :type sst_range:                    tuple

        :param depth_range:                 (low, high) suitable depth (m)
        :type depth_range:                  tuple

        :param zone_raster:                 optional precomputed zone raster on the SST grid
        :type zone_raster:                  ZoneRaster

        :return:                            DataFrame with zone_id, total_area_km2, suitable_area_km2, and
                                            percent_suitable_area
    """

    # fail fast before any raster work
    validate_range(*sst_range)
    validate_range(*depth_range)

    sst_stack = list(sst_stack)

    if len(sst_stack) == 0:
        raise ValueError("At least one SST layer is required")

    pipeline = SuitabilityPipeline(sst_stack[0].grid,
                                   zone_polygons,
                                   zone_raster=zone_raster,
                                   zone_field=zone_field,
                                   area_field=area_field,
                                   sst_in_kelvin=sst_in_kelvin,
                                   cell_area_km2=cell_area_km2,
                                   strict=strict)

    return pipeline.run(sst_stack, depth_raster, sst_range, depth_range)


compute_suitability = run


def load_species_table() -> pd.DataFrame:
    """Species tolerance presets shipped with the package."""

    with resources.files('aquasuit').joinpath('data/species.csv').open('r') as f:
        df = pd.read_csv(f, header=0)

    df['species'] = df['species'].str.lower()

    return df


def get_species_ranges(species_name):
    """Preset ((temp_low, temp_high), (depth_low, depth_high)) for a species.

    :param species_name:                Species name, case insensitive
    :type species_name:                 str

    :return:                            tuple of SST (deg C) and depth (m) ranges

    """

    df = load_species_table()
    row = df.loc[df['species'] == species_name.strip().lower()]

    if row.empty:
        raise KeyError(f"No tolerance preset for species '{species_name}'; available: {list(df['species'])}")

    row = row.iloc[0]

    return (row['temp_low'], row['temp_high']), (row['depth_low'], row['depth_high'])


def species_suitability(species_name, sst_files, depth_file, zones_file, temp_low=None, temp_high=None,
                        depth_low=None, depth_high=None, zone_field='rgn', area_field='area_km2',
                        sst_varname='analysed_sst', write_rasters=False, write_csv=False, output_dir=''):
    """Convenience wrapper for SuitabilityPipeline.  Read the input layers, compute suitable area per
    zone for one species, and optionally write the results.

    Thresholds left as None are filled from the species presets.

    :param species_name:                                Species name, used for presets and output file names
    :type species_name:                                 str

    :param sst_files:                                   Full paths to the yearly SST raster files, or the full
                                                        path to one NetCDF file (.nc) averaged to yearly layers
                                                        Units: K
    :type sst_files:                                    list; str

    :param depth_file:                                  Full path to the bathymetry raster file
                                                        Units: m, negative below sea level
    :type depth_file:                                   str

    :param zones_file:                                  Full path to the zone polygon layer
    :type zones_file:                                   str

    :param temp_low:                                    Lowest suitable SST (deg C)
    :type temp_low:                                     float

    :param temp_high:                                   Highest suitable SST (deg C)
    :type temp_high:                                    float

    :param depth_low:                                   Deepest suitable depth (m, negative below sea level)
    :type depth_low:                                    float

    :param depth_high:                                  Shallowest suitable depth (m, negative below sea level)
    :type depth_high:                                   float

    :param zone_field:                                  Name of the zone id column
                                                        Default: 'rgn'
    :type zone_field:                                   str

    :param area_field:                                  Name of the total zone area (sqkm) column
                                                        Default: 'area_km2'
    :type area_field:                                   str

    :param sst_varname:                                 Variable name for SST when `sst_files` is a NetCDF file
                                                        Default: 'analysed_sst'
    :type sst_varname:                                  str

    :param write_rasters:                               Choose to write the combined suitability raster
                                                        Default: False
    :type write_rasters:                                bool

    :param write_csv:                                   Choose to write the zone table as CSV
                                                        Default: False
    :type write_csv:                                    bool

    :param output_dir:                                  If writing to file, specify an output directory
                                                        Default: empty string
    :type output_dir:                                   str

    :returns:                                           DataFrame with zone_id, total_area_km2,
                                                        suitable_area_km2, and percent_suitable_area

    """

    # initialize logger with format and handler
    log = Logger()

    logging.info(f"Processing aquaculture suitability for species:  {species_name}")

    try:

        if (write_rasters or write_csv) and (output_dir == ''):
            raise NotADirectoryError("Must provide value for 'output_dir' if writing to file.")

        if None in (temp_low, temp_high, depth_low, depth_high):

            (preset_temp_low, preset_temp_high), (preset_depth_low, preset_depth_high) = get_species_ranges(species_name)

            temp_low = preset_temp_low if temp_low is None else temp_low
            temp_high = preset_temp_high if temp_high is None else temp_high
            depth_low = preset_depth_low if depth_low is None else depth_low
            depth_high = preset_depth_high if depth_high is None else depth_high

        logging.info(f"SST range: [{temp_low}, {temp_high}] deg C; depth range: [{depth_low}, {depth_high}] m")

        sst_range = (temp_low, temp_high)
        depth_range = (depth_low, depth_high)

        validate_range(*sst_range)
        validate_range(*depth_range)

        if isinstance(sst_files, str) and sst_files.lower().endswith('.nc'):
            sst_stack = read_sst_netcdf(sst_files, varname=sst_varname)
        else:
            sst_stack = io.read_raster_stack(sst_files)

        if len(sst_stack) == 0:
            raise ValueError("At least one SST layer is required")

        pipeline = SuitabilityPipeline(sst_stack[0].grid,
                                       io.read_zones(zones_file),
                                       zone_field=zone_field,
                                       area_field=area_field)

        depth_raster = io.read_raster(depth_file)

        suitable = pipeline.suitability_raster(sst_stack, depth_raster, sst_range, depth_range)
        areas = aggregate(suitable, pipeline.zone_raster)
        result = build_result_table(areas, pipeline.zone_polygons, zone_field=zone_field, area_field=area_field)

        # make species name lower case separated by hyphens where spaces exists
        slug = '-'.join(species_name.split()).lower()

        if write_rasters:
            io.write_raster(suitable, os.path.join(output_dir, f"{slug}_suitability.tif"))

        if write_csv:
            io.write_result(result, os.path.join(output_dir, f"{slug}_zone_suitability.csv"))

    except Exception as err:

        logging.error(f"Aquaculture suitability failed for species {species_name}: {err}")
        raise

    finally:

        logging.info(f"Completed aquaculture suitability for species:  {species_name}")
        log.close_logger()

    return result

from aquasuit.grid import Grid, Raster, SuitabilityRaster, ZoneRaster
from aquasuit.climate import reduce_mean, kelvin_to_celsius, map_values, read_sst_netcdf
from aquasuit.spatial import resample, rasterize_zones
from aquasuit.suitability import classify_range, combine
from aquasuit.zonal import aggregate
from aquasuit.pipeline import SuitabilityPipeline, run, compute_suitability, species_suitability
from aquasuit.exceptions import GridMismatchError, InvalidRangeError, UnknownZoneError


__all__ = ['Grid', 'Raster', 'SuitabilityRaster', 'ZoneRaster', 'reduce_mean', 'kelvin_to_celsius', 'map_values',
           'read_sst_netcdf', 'resample', 'rasterize_zones', 'classify_range', 'combine', 'aggregate',
           'SuitabilityPipeline', 'run', 'compute_suitability', 'species_suitability', 'GridMismatchError',
           'InvalidRangeError', 'UnknownZoneError']

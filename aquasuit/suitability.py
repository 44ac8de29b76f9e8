import numpy as np

from aquasuit.exceptions import InvalidRangeError
from aquasuit.grid import Raster, SuitabilityRaster, check_same_grid


def validate_range(low: float, high: float):
    """Raise InvalidRangeError unless `low <= high` and neither bound is NaN."""

    if np.isnan(low) or np.isnan(high):
        raise InvalidRangeError(f"Range bounds must be numbers, got [{low}, {high}]")

    if low > high:
        raise InvalidRangeError(f"Range lower bound {low} is greater than upper bound {high}")


def classify_range(raster: Raster, low: float, high: float) -> SuitabilityRaster:

    """
    Reclassify a raster into a binary suitability mask for the closed interval [low, high].

    Cells are binned three ways: below `low` and above `high` become NoData, cells within the
    interval (bounds included) become 1.0.  NoData input cells stay NoData.

    Parameters:
        :param raster:                      raster to reclassify
        :type raster:                       Raster

        :param low:                         lowest suitable value
        :type low:                          float

        :param high:                        highest suitable value
        :type high:                         float

        :return:                            SuitabilityRaster of 1.0 and NoData
    """

    validate_range(low, high)

    values = raster.values

    in_range = ~raster.nodata_mask & (values >= low) & (values <= high)

    return SuitabilityRaster(np.where(in_range, 1.0, np.nan), raster.grid)


def combine(rasters) -> SuitabilityRaster:

    """
    Combine binary suitability rasters by logical AND.

    A cell is suitable only where every input is suitable; NoData in any input yields NoData.

    Parameters:
        :param rasters:                     suitability rasters sharing one grid
        :type rasters:                      sequence of SuitabilityRaster

        :return:                            combined SuitabilityRaster
    """

    rasters = list(rasters)

    if len(rasters) == 0:
        raise ValueError("Cannot combine an empty raster sequence")

    grid = check_same_grid(*rasters)

    suitable = np.logical_and.reduce([r.values == 1.0 for r in rasters])

    return SuitabilityRaster(np.where(suitable, 1.0, np.nan), grid)

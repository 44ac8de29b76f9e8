from dataclasses import dataclass
from typing import Tuple

import numpy as np
from rasterio.crs import CRS
from rasterio.transform import from_origin

from aquasuit.exceptions import GridMismatchError


@dataclass(frozen=True)
class Grid:
    """Raster addressing shared by every layer in a pipeline run.

    :param origin:                      (x, y) of the upper-left corner of the grid in CRS units
    :type origin:                       tuple

    :param cell_width:                  width of a cell in CRS units; positive
    :type cell_width:                   float

    :param cell_height:                 height of a cell in CRS units; positive
    :type cell_height:                  float

    :param n_rows:                      number of rows
    :type n_rows:                       int

    :param n_cols:                      number of columns
    :type n_cols:                       int

    :param crs:                         coordinate reference system; anything rasterio.crs.CRS accepts
    :type crs:                          CRS; str; int

    """

    origin: Tuple[float, float]
    cell_width: float
    cell_height: float
    n_rows: int
    n_cols: int
    crs: CRS

    def __post_init__(self):

        if self.cell_width <= 0 or self.cell_height <= 0:
            raise ValueError(f"Cell size must be positive, got ({self.cell_width}, {self.cell_height})")

        if self.n_rows <= 0 or self.n_cols <= 0:
            raise ValueError(f"Grid shape must be positive, got ({self.n_rows}, {self.n_cols})")

        crs = self.crs
        if isinstance(crs, int):
            crs = CRS.from_epsg(crs)
        elif not isinstance(crs, CRS):
            crs = CRS.from_user_input(crs)

        object.__setattr__(self, 'origin', (float(self.origin[0]), float(self.origin[1])))
        object.__setattr__(self, 'cell_width', float(self.cell_width))
        object.__setattr__(self, 'cell_height', float(self.cell_height))
        object.__setattr__(self, 'n_rows', int(self.n_rows))
        object.__setattr__(self, 'n_cols', int(self.n_cols))
        object.__setattr__(self, 'crs', crs)

    @classmethod
    def from_transform(cls, transform, shape, crs):
        """Build a Grid from a north-up rasterio affine transform and a (rows, cols) shape."""

        if transform.b != 0 or transform.d != 0:
            raise ValueError("Rotated transforms are not supported")

        if transform.e >= 0:
            raise ValueError("Transform must be north-up (negative y pixel size)")

        return cls(origin=(transform.c, transform.f),
                   cell_width=transform.a,
                   cell_height=-transform.e,
                   n_rows=shape[0],
                   n_cols=shape[1],
                   crs=crs)

    @classmethod
    def from_coords(cls, xs, ys, crs):
        """Build a Grid from evenly spaced 1D cell-centre coordinates.

        Either axis may be ascending or descending; the grid is always north-up with columns
        running west to east.  The cell size is inferred from the coordinate spacing, so each
        axis needs at least two coordinates; single-slice axes are rejected.

        """

        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)

        if xs.size < 2 or ys.size < 2:
            raise ValueError("At least two coordinates are required in each dimension")

        dx = abs(xs[1] - xs[0])
        dy = abs(ys[1] - ys[0])

        for name, coords, step in (('x', xs, dx), ('y', ys, dy)):

            steps = np.diff(coords)

            # monotonic and evenly spaced
            if step == 0 or not (np.all(steps > 0) or np.all(steps < 0)) or not np.allclose(np.abs(steps), step):
                raise ValueError(f"{name} coordinates must be monotonic and evenly spaced")

        return cls(origin=(xs.min() - dx / 2.0, ys.max() + dy / 2.0),
                   cell_width=dx,
                   cell_height=dy,
                   n_rows=ys.size,
                   n_cols=xs.size,
                   crs=crs)

    @property
    def shape(self):
        return self.n_rows, self.n_cols

    @property
    def transform(self):
        return from_origin(self.origin[0], self.origin[1], self.cell_width, self.cell_height)

    @property
    def bounds(self):
        """(left, bottom, right, top) in CRS units."""

        left, top = self.origin

        return left, top - self.n_rows * self.cell_height, left + self.n_cols * self.cell_width, top

    def x_centres(self) -> np.ndarray:
        return self.origin[0] + (np.arange(self.n_cols) + 0.5) * self.cell_width

    def y_centres(self) -> np.ndarray:
        return self.origin[1] - (np.arange(self.n_rows) + 0.5) * self.cell_height

    def matches(self, other, rtol=1e-9) -> bool:
        """True when `other` addresses exactly the same cells as this grid."""

        if not isinstance(other, Grid):
            return False

        if self.shape != other.shape or self.crs != other.crs:
            return False

        # tolerance relative to the cell size so origins far from zero still compare
        tol = rtol * max(self.cell_width, self.cell_height)

        return (abs(self.origin[0] - other.origin[0]) <= tol and
                abs(self.origin[1] - other.origin[1]) <= tol and
                np.isclose(self.cell_width, other.cell_width, rtol=rtol) and
                np.isclose(self.cell_height, other.cell_height, rtol=rtol))


class Raster:
    """A 2D array of float cells tied to one Grid.  NoData is stored as NaN.

    The values are copied on construction so a Raster never shares memory with its input.

    """

    def __init__(self, values, grid: Grid):

        values = np.array(values, dtype=np.float64)

        if values.shape != grid.shape:
            raise ValueError(f"Values of shape {values.shape} do not fit grid of shape {grid.shape}")

        values.setflags(write=False)

        self.values = values
        self.grid = grid

    def __repr__(self):
        return f"{type(self).__name__}(shape={self.values.shape}, crs={self.grid.crs})"

    @property
    def nodata_mask(self) -> np.ndarray:
        return np.isnan(self.values)


class SuitabilityRaster(Raster):
    """Binary suitability mask: every cell is either 1.0 (suitable) or NoData."""

    def __init__(self, values, grid: Grid):

        super().__init__(values, grid)

        valid = self.values[~np.isnan(self.values)]

        if np.any(valid != 1.0):
            raise ValueError("Suitability rasters may only contain 1.0 or NoData")

    @property
    def suitable(self) -> np.ndarray:
        """Boolean array where the cell is suitable."""

        return self.values == 1.0

    def count(self) -> int:
        return int(np.count_nonzero(self.suitable))


class ZoneRaster:
    """Raster of zone identifiers.

    Cells hold an integer code indexing `zone_ids`; -1 marks cells outside every zone.

    """

    NODATA = -1

    def __init__(self, codes, zone_ids, grid: Grid):

        codes = np.array(codes, dtype=np.int32)

        if codes.shape != grid.shape:
            raise ValueError(f"Codes of shape {codes.shape} do not fit grid of shape {grid.shape}")

        zone_ids = tuple(str(i) for i in zone_ids)

        if len(set(zone_ids)) != len(zone_ids):
            raise ValueError("Zone ids must be unique")

        if codes.size and (codes.min() < self.NODATA or codes.max() >= len(zone_ids)):
            raise ValueError("Zone codes must index into zone_ids or be -1")

        codes.setflags(write=False)

        self.codes = codes
        self.zone_ids = zone_ids
        self.grid = grid

    def __repr__(self):
        return f"ZoneRaster(shape={self.codes.shape}, zones={len(self.zone_ids)})"

    def present_zone_ids(self):
        """Zone ids that cover at least one cell, in zone order."""

        present = np.unique(self.codes[self.codes != self.NODATA])

        return [self.zone_ids[i] for i in present]

    def zone_id_array(self) -> np.ndarray:
        """Decoded object array of zone ids with None where no zone covers the cell."""

        lookup = np.array(list(self.zone_ids) + [None], dtype=object)

        # -1 indexes the trailing None
        return lookup[self.codes]


def check_same_grid(*layers):
    """Raise GridMismatchError unless every layer sits on the same Grid.

    :param layers:                      Grid, Raster, or ZoneRaster objects

    :return:                            the shared Grid

    """

    if len(layers) == 0:
        raise ValueError("At least one layer is required")

    grids = [layer if isinstance(layer, Grid) else layer.grid for layer in layers]
    reference = grids[0]

    for index, grid in enumerate(grids[1:], start=1):

        if not reference.matches(grid):
            raise GridMismatchError(f"Layer {index} grid {grid} does not match reference grid {reference}")

    return reference

import unittest

import numpy as np

from aquasuit.exceptions import GridMismatchError, InvalidRangeError
from aquasuit.grid import Grid, Raster, SuitabilityRaster
from aquasuit.suitability import classify_range, combine


def make_grid(cell_size=1000.0, shape=(2, 2)):
    return Grid(origin=(500000.0, 4000000.0), cell_width=cell_size, cell_height=cell_size,
                n_rows=shape[0], n_cols=shape[1], crs='EPSG:32610')


class TestClassifyRange(unittest.TestCase):

    def test_boundaries_included(self):

        raster = Raster([[11.0, 30.0], [20.0, 25.0]], make_grid())

        result = classify_range(raster, 11.0, 30.0)

        np.testing.assert_array_equal(np.ones((2, 2)), result.values)

    def test_outside_range_is_nodata(self):

        eps = 1e-6
        raster = Raster([[11.0 - eps, 30.0 + eps], [-5.0, 100.0]], make_grid())

        result = classify_range(raster, 11.0, 30.0)

        self.assertTrue(np.all(np.isnan(result.values)))

    def test_nodata_stays_nodata(self):

        raster = Raster([[np.nan, 15.0], [np.nan, 40.0]], make_grid())

        result = classify_range(raster, 11.0, 30.0)

        np.testing.assert_array_equal(np.array([[np.nan, 1.0], [np.nan, np.nan]]), result.values)
        self.assertIsInstance(result, SuitabilityRaster)

    def test_nodata_mask_matches_output(self):

        raster = Raster([[np.nan, 15.0], [np.nan, 12.0]], make_grid())

        result = classify_range(raster, 11.0, 30.0)

        np.testing.assert_array_equal(np.array([[True, False], [True, False]]), raster.nodata_mask)
        np.testing.assert_array_equal(raster.nodata_mask, result.nodata_mask)

    def test_degenerate_range(self):

        raster = Raster([[5.0, 5.1], [4.9, 5.0]], make_grid())

        result = classify_range(raster, 5.0, 5.0)

        self.assertEqual(2, result.count())

    def test_invalid_range(self):

        raster = Raster([[1.0, 2.0], [3.0, 4.0]], make_grid())

        with self.assertRaises(InvalidRangeError):
            classify_range(raster, 30.0, 11.0)

        with self.assertRaises(InvalidRangeError):
            classify_range(raster, np.nan, 11.0)

    def test_input_unchanged(self):

        values = np.array([[1.0, 2.0], [3.0, 4.0]])
        raster = Raster(values, make_grid())

        classify_range(raster, 2.0, 3.0)

        np.testing.assert_array_equal(values, raster.values)


class TestCombine(unittest.TestCase):

    def setUp(self):

        self.grid = make_grid()
        self.a = SuitabilityRaster([[1.0, np.nan], [1.0, 1.0]], self.grid)
        self.b = SuitabilityRaster([[1.0, 1.0], [np.nan, 1.0]], self.grid)
        self.c = SuitabilityRaster([[np.nan, 1.0], [1.0, 1.0]], self.grid)

    def test_logical_and(self):

        result = combine([self.a, self.b])

        np.testing.assert_array_equal(np.array([[1.0, np.nan], [np.nan, 1.0]]), result.values)

    def test_commutative(self):

        np.testing.assert_array_equal(combine([self.a, self.b]).values, combine([self.b, self.a]).values)

    def test_associative(self):

        left = combine([combine([self.a, self.b]), self.c])
        right = combine([self.a, combine([self.b, self.c])])

        np.testing.assert_array_equal(left.values, right.values)
        np.testing.assert_array_equal(left.values, combine([self.a, self.b, self.c]).values)

    def test_nodata_absorbs(self):

        empty = SuitabilityRaster(np.full((2, 2), np.nan), self.grid)

        result = combine([self.a, empty])

        self.assertTrue(np.all(np.isnan(result.values)))

    def test_grid_mismatch(self):

        other = SuitabilityRaster([[1.0, 1.0], [1.0, 1.0]], make_grid(cell_size=2000.0))

        with self.assertRaises(GridMismatchError):
            combine([self.a, other])

    def test_empty_sequence(self):

        with self.assertRaises(ValueError):
            combine([])

    def test_rejects_non_binary(self):

        with self.assertRaises(ValueError):
            SuitabilityRaster([[1.0, 0.0], [1.0, 1.0]], self.grid)


if __name__ == '__main__':
    unittest.main()

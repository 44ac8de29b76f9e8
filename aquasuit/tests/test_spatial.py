import unittest

import geopandas as gpd
import numpy as np
from shapely.geometry import box

from aquasuit.exceptions import GridMismatchError
from aquasuit.grid import Grid, Raster
from aquasuit.spatial import rasterize_zones, resample


ORIGIN = (500000.0, 4000000.0)


def make_grid(cell_size=1000.0, shape=(2, 2), origin=ORIGIN):
    return Grid(origin=origin, cell_width=cell_size, cell_height=cell_size,
                n_rows=shape[0], n_cols=shape[1], crs='EPSG:32610')


class TestResample(unittest.TestCase):

    def setUp(self):

        # 6 x 6 source of 1 km cells where each value encodes row * 10 + col
        rows, cols = np.indices((6, 6))
        self.source = Raster(rows * 10.0 + cols, make_grid(shape=(6, 6)))

    def test_same_grid(self):

        result = resample(self.source, self.source.grid)

        np.testing.assert_array_equal(self.source.values, result.values)

    def test_nearest_to_coarser_grid(self):

        target = make_grid(cell_size=3000.0, shape=(2, 2))

        result = resample(self.source, target)

        # each 3 km target cell takes the source cell under its centre
        np.testing.assert_array_equal(np.array([[11.0, 14.0], [41.0, 44.0]]), result.values)
        self.assertIs(target, result.grid)

    def test_values_not_interpolated(self):

        target = make_grid(cell_size=3000.0, shape=(2, 2))

        result = resample(self.source, target)

        self.assertTrue(set(result.values.ravel()).issubset(set(self.source.values.ravel())))

    def test_crop_outside_is_nodata(self):

        # target starts 3 km west of the source so its first column is outside
        target = make_grid(cell_size=3000.0, shape=(2, 2), origin=(497000.0, 4000000.0))

        result = resample(self.source, target)

        self.assertTrue(np.all(np.isnan(result.values[:, 0])))
        np.testing.assert_array_equal(np.array([11.0, 41.0]), result.values[:, 1])

    def test_no_overlap(self):

        target = make_grid(shape=(2, 2), origin=(600000.0, 4000000.0))

        with self.assertRaises(GridMismatchError):
            resample(self.source, target)

    def test_unsupported_method(self):

        with self.assertRaises(ValueError):
            resample(self.source, self.source.grid, method='bilinear')


class TestRasterizeZones(unittest.TestCase):

    def setUp(self):

        # 2 rows x 3 columns of 1 km cells
        self.grid = make_grid(shape=(2, 3))

        x0, y0 = ORIGIN
        self.whole = box(x0, y0 - 2000.0, x0 + 2000.0, y0)
        self.west = box(x0, y0 - 2000.0, x0 + 1000.0, y0)

    def test_cell_outside_zones_is_nodata(self):

        zones = gpd.GeoDataFrame({'rgn': ['A']}, geometry=[self.whole], crs='EPSG:32610')

        result = rasterize_zones(zones, self.grid)

        np.testing.assert_array_equal(np.array([[0, 0, -1], [0, 0, -1]]), result.codes)
        self.assertEqual(('A',), result.zone_ids)
        self.assertEqual([['A', 'A', None], ['A', 'A', None]], result.zone_id_array().tolist())

    def test_first_polygon_wins(self):

        zones = gpd.GeoDataFrame({'rgn': ['A', 'B']}, geometry=[self.whole, self.west], crs='EPSG:32610')

        result = rasterize_zones(zones, self.grid)

        self.assertEqual(['A'], result.present_zone_ids())

        zones = gpd.GeoDataFrame({'rgn': ['B', 'A']}, geometry=[self.west, self.whole], crs='EPSG:32610')

        result = rasterize_zones(zones, self.grid)

        self.assertEqual([['B', 'A', None], ['B', 'A', None]], result.zone_id_array().tolist())

    def test_custom_attribute(self):

        zones = gpd.GeoDataFrame({'name': [7]}, geometry=[self.west], crs='EPSG:32610')

        result = rasterize_zones(zones, self.grid, attribute='name')

        self.assertEqual(('7',), result.zone_ids)

    def test_reprojects_zones(self):

        x0, y0 = ORIGIN

        # half a cell of margin so curved edges after reprojection cannot cross a cell centre
        zone = box(x0 - 500.0, y0 - 2500.0, x0 + 3500.0, y0 + 500.0)
        zones = gpd.GeoDataFrame({'rgn': ['A']}, geometry=[zone], crs='EPSG:32610').to_crs('EPSG:4326')

        result = rasterize_zones(zones, self.grid)

        self.assertTrue(np.all(result.codes == 0))

    def test_duplicate_ids(self):

        zones = gpd.GeoDataFrame({'rgn': ['A', 'A']}, geometry=[self.whole, self.west], crs='EPSG:32610')

        with self.assertRaises(ValueError):
            rasterize_zones(zones, self.grid)

    def test_missing_attribute(self):

        zones = gpd.GeoDataFrame({'rgn': ['A']}, geometry=[self.whole], crs='EPSG:32610')

        with self.assertRaises(KeyError):
            rasterize_zones(zones, self.grid, attribute='eez')


if __name__ == '__main__':
    unittest.main()

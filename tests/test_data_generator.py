import tempfile
import unittest
from pathlib import Path

from data_generator import (
    example_cities,
    generate_circle_cities,
    generate_random_cities,
    load_matrix_file,
    load_tsp_file,
)
from errors import InvalidInputError


TSPLIB_SAMPLE = """NAME : sample4
COMMENT : unit square
TYPE : TSP
DIMENSION : 4
EDGE_WEIGHT_TYPE : EUC_2D
NODE_COORD_SECTION
1 0 0
2 1.0 0
3 1 1

4 0 1.0
EOF
"""


class TestLoaders(unittest.TestCase):
    def _write(self, td, name, text):
        path = Path(td) / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_load_tsp_file(self):
        with tempfile.TemporaryDirectory() as td:
            cities = load_tsp_file(self._write(td, "sample.tsp", TSPLIB_SAMPLE))
        self.assertEqual(len(cities), 4)
        self.assertEqual((cities[2].x, cities[2].y), (1.0, 1.0))
        self.assertEqual(cities[0].name, "City_1")

    def test_load_tsp_file_without_section_header(self):
        with tempfile.TemporaryDirectory() as td:
            cities = load_tsp_file(self._write(td, "bare.tsp", "1 0 0\n2 3 4\n"))
        self.assertEqual(len(cities), 2)

    def test_load_tsp_file_lowercase_section(self):
        text = TSPLIB_SAMPLE.replace("NODE_COORD_SECTION", "node_coord_section")
        with tempfile.TemporaryDirectory() as td:
            cities = load_tsp_file(self._write(td, "lower.tsp", text))
        self.assertEqual(len(cities), 4)

    def test_load_tsp_file_missing(self):
        with self.assertRaises(FileNotFoundError):
            load_tsp_file("/nonexistent/file.tsp")

    def test_load_tsp_file_without_coordinates(self):
        with tempfile.TemporaryDirectory() as td:
            path = self._write(td, "empty.tsp", "NAME : x\nNODE_COORD_SECTION\nEOF\n")
            with self.assertRaises(InvalidInputError):
                load_tsp_file(path)

    def test_load_matrix_file(self):
        text = "# asymmetric costs\n0, 2, 9\n1 0 6\n15\t7\t0\n"
        with tempfile.TemporaryDirectory() as td:
            dm = load_matrix_file(self._write(td, "m.txt", text))
        self.assertEqual(dm.n, 3)
        self.assertEqual(dm.get_distance_by_index(2, 0), 15.0)

    def test_load_matrix_file_ragged(self):
        with tempfile.TemporaryDirectory() as td:
            path = self._write(td, "m.txt", "0 1\n1\n")
            with self.assertRaises(InvalidInputError):
                load_matrix_file(path)

    def test_load_matrix_file_bad_value(self):
        with tempfile.TemporaryDirectory() as td:
            path = self._write(td, "m.txt", "0 x\n1 0\n")
            with self.assertRaises(InvalidInputError):
                load_matrix_file(path)

    def test_load_matrix_file_negative(self):
        with tempfile.TemporaryDirectory() as td:
            path = self._write(td, "m.txt", "0 -1\n1 0\n")
            with self.assertRaises(InvalidInputError):
                load_matrix_file(path)


class TestGenerators(unittest.TestCase):
    def test_random_is_seeded(self):
        a = generate_random_cities(5, seed=9)
        b = generate_random_cities(5, seed=9)
        self.assertEqual(a, b)
        for city in a:
            self.assertTrue(0 <= city.x <= 100 and 0 <= city.y <= 100)

    def test_random_respects_area(self):
        for city in generate_random_cities(20, width=10, height=2, seed=1):
            self.assertTrue(0 <= city.x <= 10 and 0 <= city.y <= 2)

    def test_circle(self):
        cities = generate_circle_cities(4, radius=1, center_x=0, center_y=0)
        self.assertAlmostEqual(cities[1].x, 0.0)
        self.assertAlmostEqual(cities[1].y, 1.0)

    def test_example_cities(self):
        cities = example_cities()
        self.assertEqual(len(cities), 5)
        self.assertEqual((cities[0].x, cities[0].y), (0.0, 0.0))


if __name__ == "__main__":
    unittest.main()

import unittest

from annoremap.interval import Interval


class TestInterval(unittest.TestCase):

    def test___init__error(self):
        with self.assertRaises(AttributeError):
            Interval(4, 3)

    def test___init__single_position(self):
        self.assertEqual(Interval(5, 5), Interval(5))

    def test_eq(self):
        self.assertEqual(Interval(1, 2), Interval(1, 2))
        self.assertEqual(Interval(1, 2), (1, 2))
        self.assertNotEqual(Interval(1, 2), Interval(1, 3))
        self.assertNotEqual(Interval(1, 2), None)

    def test___get_item__(self):
        temp = Interval(1, 2)
        self.assertEqual(1, temp[0])
        self.assertEqual(2, temp[1])
        with self.assertRaises(IndexError):
            temp[3]
        with self.assertRaises(IndexError):
            temp[-1]
        with self.assertRaises(IndexError):
            temp['1b']

    def test_len(self):
        self.assertEqual(1, len(Interval(3)))
        self.assertEqual(11, len(Interval(1, 11)))

    def test_overlaps(self):
        left = Interval(-4, 1)
        middle = Interval(0, 10)
        right = Interval(5, 12)
        self.assertFalse(Interval.overlaps(left, right))
        self.assertFalse(Interval.overlaps(right, left))
        self.assertTrue(Interval.overlaps(left, middle))
        self.assertTrue(Interval.overlaps(middle, right))
        self.assertTrue(Interval.overlaps((1, 2), (2, 5)))

    def test_dist(self):
        self.assertEqual(0, Interval.dist((1, 10), (5, 15)))
        self.assertEqual(0, Interval.dist((1, 10), (11, 15)))
        self.assertEqual(4, Interval.dist((1, 10), (15, 20)))
        self.assertEqual(4, Interval.dist((15, 20), (1, 10)))

    def test_union(self):
        self.assertEqual(Interval(1, 21), Interval.union((1, 2), (4, 6), (20, 21)))
        with self.assertRaises(AttributeError):
            Interval.union()

    def test_intersection(self):
        self.assertEqual(Interval(7, 8), Interval.intersection((1, 10), (2, 8), (7, 15)))
        self.assertIsNone(Interval.intersection((1, 2), (5, 6)))

    def test_sub(self):
        self.assertEqual([Interval(1, 4)], Interval(1, 10) - Interval(5, 50))
        self.assertEqual([Interval(1, 3), Interval(7, 10)], Interval(1, 10) - Interval(4, 6))
        self.assertEqual([], Interval(4, 6) - Interval(1, 10))
        self.assertEqual([Interval(1, 10)], Interval(1, 10) - Interval(20, 30))

    def test_subtract_all(self):
        self.assertEqual(
            [Interval(1, 9), Interval(21, 49)], Interval.subtract_all(Interval(1, 100), (10, 20), (50, 100)))
        self.assertEqual([], Interval.subtract_all(Interval(1, 100), (1, 60), (40, 100)))
        self.assertEqual([Interval(1, 100)], Interval.subtract_all(Interval(1, 100)))

    def test_sort(self):
        self.assertEqual(
            [Interval(1, 2), Interval(1, 5), Interval(3, 4)],
            sorted([Interval(3, 4), Interval(1, 5), Interval(1, 2)]))

class Interval:
    """
    closed integer interval, used for genomic positions (1-based, inclusive)
    """

    def __init__(self, start, end=None):
        """
        Args:
            start (int): the start of the interval (inclusive)
            end (int): the end of the interval (inclusive)
        """
        self.start = int(start)
        self.end = int(end) if end is not None else self.start
        if self.start > self.end:
            raise AttributeError('interval start > end is not allowed', self.start, self.end)

    def __getitem__(self, index):
        try:
            index = int(index)
        except ValueError:
            raise IndexError('index input accessor must be an integer', index)
        if index == 0:
            return self.start
        elif index == 1:
            return self.end
        raise IndexError('index input accessor is out of bounds: 1 or 2 only', index)

    def __len__(self):
        """
        Example:
            >>> len(Interval(1, 11))
            11
        """
        return self.end - self.start + 1

    def __eq__(self, other):
        try:
            return self[0] == other[0] and self[1] == other[1]
        except (TypeError, IndexError):
            return False

    def __lt__(self, other):
        return (self[0], self[1]) < (other[0], other[1])

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self):
        return '{}({}, {})'.format(self.__class__.__name__, self.start, self.end)

    def __sub__(self, other):
        """the parts of this interval not covered by the other

        Example:
            >>> Interval(1, 10) - Interval(5, 50)
            [Interval(1, 4)]
            >>> Interval(1, 10) - Interval(4, 6)
            [Interval(1, 3), Interval(7, 10)]
        """
        if not Interval.overlaps(self, other):
            return [Interval(self[0], self[1])]
        result = []
        if other[0] > self[0]:
            result.append(Interval(self[0], other[0] - 1))
        if other[1] < self[1]:
            result.append(Interval(other[1] + 1, self[1]))
        return result

    @classmethod
    def overlaps(cls, first, other):
        """
        checks if two intervals have any portion of their given ranges in common

        Example:
            >>> Interval.overlaps(Interval(1, 4), Interval(5, 7))
            False
            >>> Interval.overlaps((1, 10), (10, 11))
            True
        """
        return not (first[1] < other[0] or first[0] > other[1])

    @classmethod
    def dist(cls, first, other):
        """number of bases separating two intervals, 0 when they overlap

        Example:
            >>> Interval.dist((1, 4), (8, 9))
            3
            >>> Interval.dist((5, 8), (7, 9))
            0
        """
        if first[1] < other[0]:
            return other[0] - first[1] - 1
        elif other[1] < first[0]:
            return first[0] - other[1] - 1
        return 0

    @classmethod
    def union(cls, *intervals):
        """
        the smallest interval spanning all the input intervals

        Example:
            >>> Interval.union((1, 2), (4, 6), (20, 21))
            Interval(1, 21)
        """
        if not intervals:
            raise AttributeError('cannot compute the union of an empty set of intervals')
        return Interval(min([i[0] for i in intervals]), max([i[1] for i in intervals]))

    @classmethod
    def intersection(cls, *intervals):
        """
        returns None if there is no intersection

        Example:
            >>> Interval.intersection((1, 10), (2, 8), (7, 15))
            Interval(7, 8)
        """
        if not intervals:
            raise AttributeError('cannot compute the intersection of an empty set of intervals')
        low = max([i[0] for i in intervals])
        high = min([i[1] for i in intervals])
        if low > high:
            return None
        return Interval(low, high)

    @classmethod
    def subtract_all(cls, interval, *others):
        """
        the parts of an interval not covered by any of the others

        Example:
            >>> Interval.subtract_all(Interval(1, 100), (10, 20), (50, 100))
            [Interval(1, 9), Interval(21, 49)]
        """
        remaining = [Interval(interval[0], interval[1])]
        for other in others:
            next_remaining = []
            for curr in remaining:
                next_remaining.extend(curr - other)
            remaining = next_remaining
        return sorted(remaining)

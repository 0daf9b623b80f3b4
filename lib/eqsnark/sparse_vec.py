from samson.core.base_object import BaseObject
from eqsnark.exceptions import IndexOutOfRangeException


class SparseVec(BaseObject):
    """
    Fixed-size vector of field elements that only stores non-zero entries.
    """

    def __init__(self, Fr: 'Ring', size: int):
        self.Fr      = Fr
        self.size    = size
        self.entries = {}


    def __reprdir__(self):
        return ['size', 'entries']


    @staticmethod
    def from_list(Fr: 'Ring', values: list) -> 'SparseVec':
        vec = SparseVec(Fr, len(values))
        for i, v in enumerate(values):
            vec.set(i, v)

        return vec


    def _check_index(self, index: int):
        if not 0 <= index < self.size:
            raise IndexOutOfRangeException(f"Index {index} is out of range for a vector of size {self.size}")


    def get(self, index: int):
        self._check_index(index)
        return self.entries.get(index, self.Fr(0))


    def set(self, index: int, value):
        self._check_index(index)
        value = self.Fr(int(value))

        if value == self.Fr(0):
            self.entries.pop(index, None)
        else:
            self.entries[index] = value


    def add(self, index: int, value):
        self.set(index, self.get(index) + self.Fr(int(value)))


    __getitem__ = get
    __setitem__ = set


    def __len__(self):
        return self.size


    def __iter__(self):
        for index in sorted(self.entries):
            yield index, self.entries[index]


    def __eq__(self, other):
        return type(other) is SparseVec and self.size == other.size and self.entries == other.entries


    def indices(self):
        return sorted(self.entries)


    def is_empty(self):
        return not self.entries


    def dot(self, other: 'SparseVec'):
        if self.size != other.size:
            raise IndexOutOfRangeException(f"Cannot take dot product of vectors of size {self.size} and {other.size}")

        return sum([v * other.entries[i] for i, v in self.entries.items() if i in other.entries], self.Fr(0))


    def slice(self, start: int, end: int) -> 'SparseVec':
        if not 0 <= start <= end <= self.size:
            raise IndexOutOfRangeException(f"Slice [{start}:{end}] is out of range for a vector of size {self.size}")

        vec = SparseVec(self.Fr, end - start)
        for i, v in self.entries.items():
            if start <= i < end:
                vec.entries[i - start] = v

        return vec


    def to_list(self):
        return [self.get(i) for i in range(self.size)]

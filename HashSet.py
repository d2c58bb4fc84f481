import logging
from collections import namedtuple

import numpy as np

from Set import Set, PreconditionViolation
from util.partitioner import MaskPartitioner


logger = logging.getLogger(__name__)


class CapacityError(MemoryError):
    """The table would have to grow past HashSet.MAX_CAPACITY buckets."""


class TableStats(namedtuple("TableStats", ["size",
                                           "capacity",
                                           "load",
                                           "occupied",
                                           "max_chain",
                                           "mean_chain",
                                           "chain_histogram"])):
    """
    Snapshot of a HashSet's bucket layout.

    ``chain_histogram[k]`` is the number of buckets holding exactly ``k``
    elements; ``mean_chain`` averages over occupied buckets only.
    """


def _rebuild(init_capacity, load_factor, elements):
    return HashSet.from_iterable(elements,
                                 init_capacity=init_capacity,
                                 load_factor=load_factor)


def _round_up_to_power_of_two(n):
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


class HashSet(Set):
    """
    Set backed by a hash table with separate chaining.

    Each bucket is a list (the chain). The number of buckets is always a
    power of two, at least ``MIN_CAPACITY``, and an element lives in bucket
    ``hash(element) & (capacity - 1)``. The table doubles before an insertion
    would push ``size / capacity`` past ``load_factor``; it never shrinks.

    >>> s = HashSet()
    >>> s.add("3")
    >>> s.add("4")
    >>> s.size()
    2
    >>> s.remove("3")
    '3'
    >>> s.contains("3")
    False
    """

    MIN_CAPACITY = 4
    MAX_CAPACITY = 2 ** 30
    GROWTH_FACTOR = 2

    def __init__(self, init_capacity=MIN_CAPACITY, load_factor=0.75):
        """

        :param init_capacity:   (int) number of buckets to start with, rounded
                                up to a power of two, never below MIN_CAPACITY
        :param load_factor:     (float) highest allowed size / capacity ratio
        """
        if not 0 <= init_capacity <= HashSet.MAX_CAPACITY:
            raise PreconditionViolation(
                "Initial capacity must be between 0 and {}, got {}"
                .format(HashSet.MAX_CAPACITY, init_capacity))
        if not 0.0 < load_factor < 1.0:
            raise PreconditionViolation(
                "Load factor must be in (0.0, 1.0), got {}".format(load_factor))

        self._init_capacity = max(_round_up_to_power_of_two(init_capacity),
                                  HashSet.MIN_CAPACITY)
        self._load_factor = load_factor
        self._modcount = 0
        self._create_new_rep(self._init_capacity)

    @classmethod
    def from_iterable(cls, iterable, init_capacity=MIN_CAPACITY, load_factor=0.75):
        """Builds a set of the distinct elements of ``iterable``."""
        s = cls(init_capacity, load_factor)
        for element in iterable:
            if not s.contains(element):
                s.add(element)
        return s

    def _create_new_rep(self, capacity):
        self._table = self._allocate_table(capacity)
        self._partitioner = MaskPartitioner(capacity)
        self._size = 0
        # every bucket below this index is empty
        self._first_hint = capacity

    def _allocate_table(self, capacity):
        return [[] for _ in range(capacity)]

    @property
    def capacity(self):
        return len(self._table)

    @property
    def load_factor(self):
        return self._load_factor

    def _bucket_of(self, element):
        return self._table[self._partitioner.get_partition(element)]

    def add(self, element):
        if self.contains(element):
            raise PreconditionViolation("Violation of: x is not in this")

        if self._size + 1 > len(self._table) * self._load_factor:
            self._grow(self._size + 1)

        index = self._partitioner.get_partition(element)
        self._table[index].append(element)
        self._size += 1
        self._modcount += 1
        if index < self._first_hint:
            self._first_hint = index

    def _grow(self, min_size):
        new_capacity = len(self._table)
        while min_size > new_capacity * self._load_factor:
            new_capacity *= HashSet.GROWTH_FACTOR

        if new_capacity > HashSet.MAX_CAPACITY:
            logger.warning("HashSet cannot grow to %d buckets (limit %d)",
                           new_capacity, HashSet.MAX_CAPACITY)
            raise CapacityError(
                "Can't make capacity bigger than {} buckets".format(HashSet.MAX_CAPACITY))

        self._rehash(new_capacity)

    def _rehash(self, new_capacity):
        logger.debug("Resizing HashSet from %d to %d buckets (%d elements)",
                     len(self._table), new_capacity, self._size)

        # build the new table on the side and swap it in only once complete
        try:
            table = self._allocate_table(new_capacity)
            partitioner = MaskPartitioner(new_capacity)
            first_hint = new_capacity
            for bucket in self._table:
                for element in bucket:
                    index = partitioner.get_partition(element)
                    table[index].append(element)
                    if index < first_hint:
                        first_hint = index
        except MemoryError:
            logger.warning("Resize to %d buckets failed, keeping %d buckets",
                           new_capacity, len(self._table))
            raise

        self._table = table
        self._partitioner = partitioner
        self._first_hint = first_hint

    def remove(self, element):
        bucket = self._bucket_of(element)
        try:
            position = bucket.index(element)
        except ValueError:
            raise PreconditionViolation("Violation of: x is in this") from None

        stored = bucket.pop(position)
        self._size -= 1
        self._modcount += 1
        return stored

    def remove_any(self):
        if self._size == 0:
            raise PreconditionViolation("Violation of: |this| > 0")

        table = self._table
        index = self._first_hint
        while not table[index]:
            index += 1
        self._first_hint = index

        element = table[index].pop(0)
        self._size -= 1
        self._modcount += 1
        return element

    def contains(self, element):
        return element in self._bucket_of(element)

    def size(self):
        return self._size

    def new_instance(self):
        return type(self)(self._init_capacity, self._load_factor)

    def clear(self):
        self._create_new_rep(self._init_capacity)
        self._modcount += 1

    def transfer_from(self, source):
        """
        Takes over ``source``'s elements and configuration; ``source`` is
        left empty at its initial capacity.
        """
        self._check_transfer_source(source)

        self._table = source._table
        self._partitioner = source._partitioner
        self._size = source._size
        self._first_hint = source._first_hint
        self._init_capacity = source._init_capacity
        self._load_factor = source._load_factor
        self._modcount += 1

        source._create_new_rep(source._init_capacity)
        source._modcount += 1

    def __iter__(self):
        modcount = self._modcount
        for bucket in self._table:
            for element in bucket:
                yield element
                if self._modcount != modcount:
                    raise RuntimeError("HashSet changed during iteration")

    def __reduce__(self):
        # bucket layout depends on hash(), which is salted per process for str
        return _rebuild, (self._init_capacity, self._load_factor, list(self))

    def stats(self):
        capacity = len(self._table)
        lengths = np.fromiter((len(bucket) for bucket in self._table),
                              dtype=np.int64, count=capacity)
        occupied = int(np.count_nonzero(lengths))
        mean_chain = float(lengths[lengths > 0].mean()) if occupied else 0.0

        return TableStats(size=self._size,
                          capacity=capacity,
                          load=self._size / capacity,
                          occupied=occupied,
                          max_chain=int(lengths.max()),
                          mean_chain=mean_chain,
                          chain_histogram=np.bincount(lengths))

    def check_representation(self):
        """
        Full scan of the table against the representation invariants.

        Only meant for tests and debugging; raises PreconditionViolation
        naming the first broken invariant.
        """
        capacity = len(self._table)
        if capacity < HashSet.MIN_CAPACITY or capacity & (capacity - 1):
            raise PreconditionViolation(
                "capacity {} is not a power of two >= {}".format(capacity, HashSet.MIN_CAPACITY))
        if self._partitioner.num_partitions != capacity:
            raise PreconditionViolation(
                "partitioner covers {} buckets, table has {}"
                .format(self._partitioner.num_partitions, capacity))

        count = 0
        lowest = capacity
        for index, bucket in enumerate(self._table):
            for position, element in enumerate(bucket):
                if self._partitioner.get_partition(element) != index:
                    raise PreconditionViolation(
                        "{!r} is stored in bucket {}, hashes to {}"
                        .format(element, index, self._partitioner.get_partition(element)))
                if element in bucket[position + 1:]:
                    raise PreconditionViolation("{!r} is stored twice".format(element))
            if bucket and index < lowest:
                lowest = index
            count += len(bucket)

        if count != self._size:
            raise PreconditionViolation(
                "size is {} but the table holds {} elements".format(self._size, count))
        if self._size > capacity * self._load_factor:
            raise PreconditionViolation(
                "load {}/{} exceeds load factor {}".format(self._size, capacity, self._load_factor))
        if self._first_hint > lowest:
            raise PreconditionViolation(
                "bucket {} is occupied below first hint {}".format(lowest, self._first_hint))
        return True

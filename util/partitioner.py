

class Partitioner:

    def __init__(self, num_partitions):
        self.num_partitions = num_partitions

    def get_partition(self, key):
        raise NotImplementedError


class MaskPartitioner(Partitioner):
    """
    Slot selection for power-of-two tables: the low bits of the hash code.

    >>> p = MaskPartitioner(8)
    >>> p.get_partition(13)
    5
    >>> p.get_partition(-4)
    4
    """

    def __init__(self, num_partitions):
        assert num_partitions > 0 and \
            (num_partitions & (num_partitions - 1)) == 0, \
            "Number of partitions ({}) must be a power of two.".format(num_partitions)
        Partitioner.__init__(self, num_partitions)
        self.mask = num_partitions - 1

    def get_partition(self, key):
        # ints are two's complement under &, so the result is never negative
        return hash(key) & self.mask

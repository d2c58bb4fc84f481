import logging

from pyspark.accumulators import AccumulatorParam
from pyspark.rdd import RDD

from Set import Set
from HashSet import HashSet


logger = logging.getLogger(__name__)


def merge_into(target, source):
    """
    Adds every element of ``source`` that ``target`` lacks.

    :param target:  (Set) updated in place
    :param source:  (iterable)
    :return:        target
    """
    for element in source:
        if not target.contains(element):
            target.add(element)
    return target


class HashSetAccumulatorParam(AccumulatorParam):
    """
    Lets tasks collect elements into a driver-side HashSet.

    >>> acc = sc.accumulator(HashSet(), HashSetAccumulatorParam())  # doctest: +SKIP
    >>> rdd.foreach(lambda x: acc.add(x))                           # doctest: +SKIP
    """

    def zero(self, value):
        return value.new_instance()

    def addInPlace(self, value1, value2):
        """

        :param value1:  (HashSet) accumulated so far
        :param value2:  (Set or element) a partial set from a task, or a single element
        :return:
        """
        if isinstance(value2, Set):
            return merge_into(value1, value2)

        if not value1.contains(value2):
            value1.add(value2)
        return value1


def collect_distinct(rdd,
                     init_capacity=HashSet.MIN_CAPACITY,
                     load_factor=0.75):
    """
    Gathers the distinct elements of ``rdd`` into one HashSet on the driver.

    Each partition is reduced to its own set first, so only one set per
    partition crosses the wire.
    """
    assert isinstance(rdd, RDD), "rdd should be an RDD"

    def build_partition_set(iterator):
        yield HashSet.from_iterable(iterator,
                                    init_capacity=init_capacity,
                                    load_factor=load_factor)

    result = rdd.mapPartitions(build_partition_set)\
                .fold(HashSet(init_capacity, load_factor), merge_into)

    logger.info("Collected %d distinct elements from %d partitions",
                result.size(), rdd.getNumPartitions())
    return result

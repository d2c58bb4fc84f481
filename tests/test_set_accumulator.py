import functools
import pickle

import pytest
from pyspark.rdd import RDD

from HashSet import HashSet
from ListSet import ListSet
from SetAccumulator import HashSetAccumulatorParam, collect_distinct, merge_into


class LocalRDD(RDD):
    """
    In-memory partitions standing in for an RDD when no JVM is around.

    Values cross a pickle boundary wherever Spark would ship them between
    driver and tasks.
    """

    def __init__(self, partitions):
        self._partitions = partitions

    def getNumPartitions(self):
        return len(self._partitions)

    def mapPartitions(self, f, preservesPartitioning=False):
        return LocalRDD([list(f(iter(p))) for p in self._partitions])

    def fold(self, zeroValue, op):
        def fold_partition(items):
            acc = pickle.loads(pickle.dumps(zeroValue))
            for obj in items:
                acc = op(acc, obj)
            return acc

        vals = [pickle.loads(pickle.dumps(fold_partition(p)))
                for p in self._partitions]
        return functools.reduce(op, vals, zeroValue)


def test_collect_distinct_merges_partitions_locally():
    rdd = LocalRDD([["3", "4"], ["4", "5", "5"], [], ["3"]])
    result = collect_distinct(rdd, init_capacity=16, load_factor=0.5)
    assert isinstance(result, HashSet)
    assert result == HashSet.from_iterable(["3", "4", "5"])
    assert result.load_factor == 0.5
    assert result.check_representation()


def test_collect_distinct_all_partitions_empty_locally():
    result = collect_distinct(LocalRDD([[], []]))
    assert result.size() == 0


def test_merge_into_skips_members():
    target = HashSet.from_iterable(["a", "b"])
    result = merge_into(target, ["b", "c", "c", "d"])
    assert result is target
    assert target == HashSet.from_iterable(["a", "b", "c", "d"])


def test_merge_into_other_representation():
    target = ListSet()
    merge_into(target, HashSet.from_iterable(range(10)))
    assert target == HashSet.from_iterable(range(10))


def test_accumulator_param_zero_keeps_configuration():
    param = HashSetAccumulatorParam()
    zero = param.zero(HashSet.from_iterable(["a"], init_capacity=32, load_factor=0.5))
    assert zero.size() == 0
    assert zero.capacity == 32
    assert zero.load_factor == 0.5


def test_accumulator_param_add_in_place():
    param = HashSetAccumulatorParam()
    acc = param.zero(HashSet())
    acc = param.addInPlace(acc, "x")
    acc = param.addInPlace(acc, "x")
    acc = param.addInPlace(acc, HashSet.from_iterable(["x", "y"]))
    assert acc == HashSet.from_iterable(["x", "y"])


def test_collect_distinct_requires_rdd():
    with pytest.raises(AssertionError):
        collect_distinct([1, 2, 3])


def test_collect_distinct(sc):
    rdd = sc.parallelize(["3", "4", "5", "4", "3", "3"] * 10, 4)
    result = collect_distinct(rdd)
    assert isinstance(result, HashSet)
    assert result == HashSet.from_iterable(["3", "4", "5"])
    assert result.check_representation()


def test_collect_distinct_empty(sc):
    result = collect_distinct(sc.parallelize([], 2), load_factor=0.5)
    assert result.size() == 0
    assert result.load_factor == 0.5


def test_accumulator_on_spark(sc):
    acc = sc.accumulator(HashSet(), HashSetAccumulatorParam())
    sc.parallelize(range(100), 4).map(lambda x: x % 17).foreach(lambda x: acc.add(x))
    assert acc.value == HashSet.from_iterable(range(17))

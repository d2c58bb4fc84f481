import os
import sys

import pytest


ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@pytest.fixture(scope="session")
def sc():
    """Local SparkContext; Spark tests are skipped when no JVM can be started."""
    pyspark = pytest.importorskip("pyspark")

    saved = {name: os.environ.get(name) for name in ("PYTHONPATH", "PYSPARK_PYTHON")}

    # python workers must be able to import the project modules
    paths = [ROOT] + [p for p in os.environ.get("PYTHONPATH", "").split(os.pathsep) if p]
    os.environ["PYTHONPATH"] = os.pathsep.join(paths)
    os.environ.setdefault("PYSPARK_PYTHON", sys.executable)

    conf = pyspark.SparkConf().setMaster("local[2]").setAppName("hashset-tests")
    try:
        context = pyspark.SparkContext(conf=conf)
    except Exception as e:
        _restore_environ(saved)
        pytest.skip("cannot start a local SparkContext: {}".format(e))

    yield context
    context.stop()
    _restore_environ(saved)


def _restore_environ(saved):
    for name, value in saved.items():
        if value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = value

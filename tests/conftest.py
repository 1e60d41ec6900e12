import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from reltable.config import EngineConfig, set_config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path):
    # Keep a developer's ~/.reltable.json or RELTABLE_* variables out of the tests.
    set_config(EngineConfig(store_dir=str(tmp_path / "store")))
    yield
    set_config(None)
    logger = logging.getLogger("reltable")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def movie_schema():
    return (
        "movie",
        "title year length genre studioName producerNo",
        "String Integer Integer String String Integer",
        "title year",
    )

from __future__ import annotations

import pytest

from shared.config import PrismConfig
from shared.logger import PrismLogger

from dexmap.core.engine import DexMapEngine

from tests.dexfactory import BodyWriter, build_dex, u4


@pytest.fixture
def config() -> PrismConfig:
    return PrismConfig()


@pytest.fixture
def engine(config: PrismConfig) -> DexMapEngine:
    logger = PrismLogger("dexmap.test", log_level="DEBUG", console_output=False)
    return DexMapEngine(config=config, logger=logger)


@pytest.fixture
def single_string_dex() -> bytes:
    """One string_id pointing at ``\\x03abc`` placed at the data offset."""
    w = BodyWriter()
    ids = w.add(u4(0))
    target = w.add(b"\x03abc")
    body = u4(target) + w.getvalue()[4:]
    return build_dex(
        body,
        string_ids_size=1,
        string_ids_off=ids,
        data_size=4,
        data_off=target,
    )

import pytest
from loguru import logger

from pwgram.config import get_settings
from pwgram.randomness import BytePool, set_default_pool
from pwgram.train import train


WORDS = """\
banana
bandana
cabana
anagram
panorama
caravan
madam
salsa
alabama
"""


@pytest.fixture(autouse=True)
def reset_process_state():
    """Settings and the default pool are rebuilt per test; library logging is silenced again after."""
    get_settings.cache_clear()
    set_default_pool(None)
    yield
    get_settings.cache_clear()
    set_default_pool(None)
    logger.disable("pwgram")


@pytest.fixture
def pool():
    return BytePool(seed=1234)


@pytest.fixture
def words():
    return WORDS


@pytest.fixture
def word_model():
    return train(list(WORDS))

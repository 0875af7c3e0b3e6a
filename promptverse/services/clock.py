import time
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Epoch em milissegundos (mesma unidade dos timestamps exportados)."""
    return int(time.time() * 1000)

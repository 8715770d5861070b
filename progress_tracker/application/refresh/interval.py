"""
Timer periódico declarativo sobre o event loop do asyncio.

- `delay=None` pausa o timer;
- trocar o delay reinicia a contagem do zero;
- trocar o callback NÃO reinicia o timer: cada tick chama o callback mais
  recente registrado.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class IntervalTimer:
    def __init__(
        self,
        callback: Callable[[], object],
        delay: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._callback = callback
        self._loop = loop
        self._delay: Optional[float] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._disposed = False
        self.set_delay(delay)

    @property
    def delay(self) -> Optional[float]:
        return self._delay

    @property
    def is_running(self) -> bool:
        return self._handle is not None

    def set_callback(self, callback: Callable[[], object]) -> None:
        self._callback = callback

    def set_delay(self, delay: Optional[float]) -> None:
        if self._disposed:
            return
        if delay is not None and delay <= 0:
            raise ValueError("delay precisa ser positivo")
        if delay == self._delay and (delay is None or self._handle is not None):
            return
        self._cancel()
        self._delay = delay
        if delay is not None:
            self._arm()

    def dispose(self) -> None:
        self._cancel()
        self._disposed = True

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _arm(self) -> None:
        self._handle = self._get_loop().call_later(self._delay, self._tick)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        # Rearma antes do callback: um callback com erro não para o loop
        self._arm()
        try:
            self._callback()
        except Exception:
            logger.exception("Erro no callback do timer periódico")

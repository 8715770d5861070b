"""Sinal de visibilidade da página (primeiro plano / segundo plano)."""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

VisibilityListener = Callable[[bool], None]


class PageVisibility:
    """
    Booleano "a página está visível" com notificação de mudança.

    O host (UI, websocket, etc.) chama set_visible; os schedulers assinam
    para pausar e retomar o timer.
    """

    def __init__(self, visible: bool = True) -> None:
        self._visible = visible
        self._listeners: tuple[VisibilityListener, ...] = ()

    @property
    def is_visible(self) -> bool:
        return self._visible

    def set_visible(self, visible: bool) -> None:
        if visible == self._visible:
            return
        self._visible = visible
        for listener in self._listeners:
            try:
                listener(visible)
            except Exception:
                logger.exception("Erro em listener de visibilidade")

    def subscribe(self, listener: VisibilityListener) -> Callable[[], None]:
        self._listeners = (*self._listeners, listener)

        def unsubscribe() -> None:
            self._listeners = tuple(l for l in self._listeners if l is not listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

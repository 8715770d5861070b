from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Sequence

from .entity import ProgressBar


class IProgressBarRepository(ABC):
    """Record store das barras: única fonte da verdade dos campos persistidos."""

    @abstractmethod
    async def create(self, bar: ProgressBar) -> ProgressBar:
        ...

    @abstractmethod
    async def get_by_id(self, bar_id: str) -> Optional[ProgressBar]:
        ...

    @abstractmethod
    async def update(self, bar_id: str, changes: Mapping[str, Any]) -> Optional[ProgressBar]:
        """Atualização parcial; devolve None se a barra não existir."""
        ...

    @abstractmethod
    async def delete(self, bar_id: str) -> None:
        ...

    @abstractmethod
    async def list_all(self) -> Sequence[ProgressBar]:
        ...

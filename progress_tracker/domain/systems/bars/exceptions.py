"""Exceções de domínio das barras de progresso."""

from __future__ import annotations

from typing import Sequence

from progress_tracker.domain.systems.bars.date_validator import ValidationError


class BarValidationError(ValueError):
    """Configuração rejeitada; carrega a lista completa de erros."""

    def __init__(self, errors: Sequence[ValidationError]):
        self.errors = list(errors)
        messages = ", ".join(e.message for e in self.errors)
        super().__init__(f"Validation failed: {messages}")


class NotTimeBasedBarError(TypeError):
    """Erro de programação: cálculo temporal pedido para uma barra manual."""

    def __init__(self, bar_id: str | None = None):
        self.bar_id = bar_id
        super().__init__("Bar is not a time-based progress bar")


class BarNotFoundError(LookupError):
    def __init__(self, bar_id: str):
        self.bar_id = bar_id
        super().__init__(f"Barra {bar_id} não encontrada")

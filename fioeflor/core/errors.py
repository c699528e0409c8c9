"""Erros de negócio da aplicação.

Cada erro carrega a mensagem exibida ao usuário e o status HTTP que o
handler registrado em ``main.py`` devolve no envelope ``{"error": ...}``.
"""

from decimal import Decimal
from typing import Optional


def format_quantity(value: Decimal) -> str:
    """Formata uma quantidade sem zeros à direita (ex.: 10.000 -> "10")."""
    normalized = Decimal(value).normalize()
    return format(normalized, "f")


class DomainError(Exception):
    """Base para erros de regra de negócio."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Produto, material, insumo, cliente ou venda inexistente."""

    status_code = 404


class InvalidQuantityError(DomainError):
    """Quantidade não positiva ou não numérica."""

    def __init__(self, message: str = "Quantidade inválida. Informe um valor maior que 0."):
        super().__init__(message)


class InvalidRequestError(DomainError):
    """Requisição malformada (ex.: venda sem produtos)."""


class InsufficientStockError(DomainError):
    """A quantidade necessária de um insumo excede o disponível."""

    def __init__(
        self,
        supply_name: str,
        unit: str,
        available: Decimal,
        required: Decimal,
        material_name: Optional[str] = None,
    ):
        self.supply_name = supply_name
        self.unit = unit
        self.available = Decimal(available)
        self.required = Decimal(required)
        self.material_name = material_name

        origin = f' (material "{material_name}")' if material_name else ""
        message = (
            f'Estoque insuficiente do insumo "{supply_name}"{origin}. '
            f"Disponível: {format_quantity(self.available)} {unit}, "
            f"necessário: {format_quantity(self.required)} {unit}"
        )
        super().__init__(message)


class ConflictError(DomainError):
    """Remoção bloqueada por integridade referencial."""

    status_code = 409


class PersistenceError(DomainError):
    """Falha opaca da camada de armazenamento."""

    status_code = 500

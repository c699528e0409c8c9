"""Livro de estoque dos insumos.

Todas as operações trabalham dentro da sessão recebida e não fazem commit:
quem chama decide a fronteira da transação (uma venda inteira, ou um ajuste
manual). O novo saldo é calculado em ``Decimal`` e gravado com trava
otimista pela coluna ``version``: se outra transação alterou o insumo entre a
leitura e a escrita, o saldo é relido e conferido de novo.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from fioeflor.core.errors import ConflictError, InsufficientStockError, InvalidQuantityError, NotFoundError
from fioeflor.models.inventory import QUANTITY_SCALE, Supply

logger = logging.getLogger(__name__)

# Tentativas de gravação quando o insumo muda entre a leitura e a escrita
MAX_WRITE_ATTEMPTS = 5


class MovementType(str, Enum):
    IN = "entrada"
    OUT = "saida"


@dataclass(frozen=True)
class StockMovement:
    """Movimentação efêmera: só vai na resposta, não é gravada."""

    type: MovementType
    quantity: Decimal
    reason: Optional[str] = None


def _as_positive_quantity(quantity) -> Decimal:
    """Quantidade de ajuste manual: positiva e com no máximo 3 casas decimais."""
    try:
        value = Decimal(str(quantity))
        if not value.is_finite() or value <= 0 or value != value.quantize(QUANTITY_SCALE):
            raise InvalidQuantityError()
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidQuantityError() from None
    return value


class StockLedger:
    def __init__(self, db: Session):
        self.db = db

    def get_supply(self, supply_id: UUID) -> Supply:
        supply = self.db.get(Supply, supply_id)
        if supply is None:
            raise NotFoundError(f"Insumo {supply_id} não encontrado")
        return supply

    def has_sufficient_stock(self, supply_id: UUID, required_quantity: Decimal) -> bool:
        supply = self.get_supply(supply_id)
        return Decimal(required_quantity) <= supply.stock

    def _write_stock(self, supply: Supply, new_stock: Decimal) -> bool:
        """Grava ``new_stock`` se o insumo ainda está na versão lida."""
        result = self.db.execute(
            update(Supply)
            .where(Supply.id == supply.id, Supply.version == supply.version)
            .values(stock=new_stock, version=supply.version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _apply(self, supply_id: UUID, delta: Decimal, material_name: Optional[str] = None) -> Supply:
        supply = self.get_supply(supply_id)

        for _ in range(MAX_WRITE_ATTEMPTS):
            self.db.refresh(supply)
            new_stock = supply.stock + delta
            if new_stock < 0:
                logger.warning(
                    "Baixa recusada para o insumo '%s': disponível %s, necessário %s",
                    supply.name, supply.stock, -delta,
                )
                raise InsufficientStockError(supply.name, supply.unit, supply.stock, -delta, material_name)
            if self._write_stock(supply, new_stock):
                self.db.refresh(supply)
                return supply
            logger.info("Insumo '%s' alterado por outra transação; relendo o saldo", supply.name)

        raise ConflictError(f'O estoque do insumo "{supply.name}" está sendo alterado; tente novamente.')

    def decrement(self, supply_id: UUID, quantity: Decimal, material_name: Optional[str] = None) -> Supply:
        """Subtrai ``quantity`` do estoque, conferindo o saldo no momento da escrita.

        A quantidade é arredondada para a escala da coluna (3 casas).
        """
        quantity = Decimal(quantity).quantize(QUANTITY_SCALE, rounding=ROUND_HALF_UP)
        return self._apply(supply_id, -quantity, material_name)

    def increment(self, supply_id: UUID, quantity, reason: Optional[str] = None) -> Tuple[Supply, StockMovement]:
        value = _as_positive_quantity(quantity)
        supply = self._apply(supply_id, value)

        logger.info("Entrada de %s %s no insumo '%s' (motivo: %s)", value, supply.unit, supply.name, reason or "-")
        return supply, StockMovement(MovementType.IN, value, reason)

    def decrement_with_reason(self, supply_id: UUID, quantity, reason: Optional[str] = None) -> Tuple[Supply, StockMovement]:
        """Baixa manual (perda, uso interno...), com as mesmas validações da entrada."""
        value = _as_positive_quantity(quantity)
        supply = self.decrement(supply_id, value)

        logger.info("Saída de %s %s do insumo '%s' (motivo: %s)", value, supply.unit, supply.name, reason or "-")
        return supply, StockMovement(MovementType.OUT, value, reason)

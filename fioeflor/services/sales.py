"""Registro de vendas com baixa de estoque em dois níveis.

A venda inteira (resolução, validação, baixa e gravação) roda em uma única
transação: qualquer falha desfaz tudo, inclusive baixas de itens anteriores.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from fioeflor.core.errors import (
    DomainError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidRequestError,
    NotFoundError,
    PersistenceError,
)
from fioeflor.models.sales import Customer, Sale, SaleItem
from fioeflor.services.composition import SupplyRequirement, expand_product, load_product
from fioeflor.services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)

MONEY_SCALE = Decimal("0.01")


@dataclass
class _MergedRequirement:
    supply_id: UUID
    supply_name: str
    unit: str
    required_quantity: Decimal
    material_name: Optional[str] = None


def merge_requirements(requirements: Iterable[SupplyRequirement]) -> List[_MergedRequirement]:
    """Soma os requisitos por insumo, preservando a ordem de primeira aparição.

    O material atribuído é o do primeiro caminho via material que alcançou o insumo.
    """
    merged: Dict[UUID, _MergedRequirement] = {}
    for requirement in requirements:
        entry = merged.get(requirement.supply_id)
        if entry is None:
            merged[requirement.supply_id] = _MergedRequirement(
                supply_id=requirement.supply_id,
                supply_name=requirement.supply_name,
                unit=requirement.unit,
                required_quantity=requirement.required_quantity,
                material_name=requirement.material_name,
            )
            continue
        entry.required_quantity += requirement.required_quantity
        if entry.material_name is None:
            entry.material_name = requirement.material_name
    return list(merged.values())


def _apply_stock(ledger: StockLedger, requirements: List[SupplyRequirement]) -> None:
    merged = merge_requirements(requirements)

    # 1. Validar todos os insumos antes de qualquer baixa
    for entry in merged:
        if not ledger.has_sufficient_stock(entry.supply_id, entry.required_quantity):
            supply = ledger.get_supply(entry.supply_id)
            logger.warning(
                "Venda recusada: insumo '%s' disponível %s %s, necessário %s",
                entry.supply_name, supply.stock, entry.unit, entry.required_quantity,
            )
            raise InsufficientStockError(
                entry.supply_name, entry.unit, supply.stock, entry.required_quantity, entry.material_name
            )

    # 2. Aplicar as baixas (cada uma é conferida de novo pelo UPDATE condicional)
    for entry in merged:
        ledger.decrement(entry.supply_id, entry.required_quantity, material_name=entry.material_name)


def _normalize_timestamp(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def load_sale(db: Session, sale_id: UUID) -> Sale:
    sale = (
        db.query(Sale)
        .options(
            joinedload(Sale.customer),
            selectinload(Sale.items).joinedload(SaleItem.product),
        )
        .filter(Sale.id == sale_id)
        .first()
    )
    if sale is None:
        raise NotFoundError("Venda não encontrada")
    return sale


def create_sale(
    db: Session,
    customer_id: Optional[UUID],
    items: list,
    track_stock: bool = False,
    sold_at: Optional[datetime] = None,
) -> Sale:
    """Registra uma venda.

    ``items`` é uma sequência de objetos com ``product_id``, ``quantity`` e
    ``unit_price`` (opcional; sem ele vale o preço atual do produto). Com
    ``track_stock`` ligado, os insumos de todos os itens são somados por
    insumo, validados contra o estoque e baixados.
    """
    if not items:
        raise InvalidRequestError("Adicione pelo menos um produto à venda")

    ledger = StockLedger(db)
    try:
        if customer_id is not None and db.get(Customer, customer_id) is None:
            raise NotFoundError(f"Cliente {customer_id} não encontrado")

        total = Decimal("0")
        lines = []
        requirements: List[SupplyRequirement] = []

        for position, item in enumerate(items):
            product = load_product(db, item.product_id)

            if item.quantity is None or item.quantity <= 0:
                raise InvalidQuantityError()

            unit_price = product.price if item.unit_price is None else Decimal(str(item.unit_price))
            # Mesma escala da coluna, para que o total feche com a soma das linhas gravadas
            unit_price = unit_price.quantize(MONEY_SCALE, rounding=ROUND_HALF_UP)
            total += unit_price * item.quantity

            lines.append(
                SaleItem(
                    product_id=product.id,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    position=position,
                )
            )

            if track_stock:
                requirements.extend(expand_product(product, item.quantity))

        if track_stock:
            _apply_stock(ledger, requirements)

        sale = Sale(
            customer_id=customer_id,
            sold_at=_normalize_timestamp(sold_at),
            total=total,
            items=lines,
        )
        db.add(sale)
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Falha ao gravar a venda")
        raise PersistenceError("Erro ao criar venda") from exc

    logger.info(
        "Venda %s criada: total %s, %d item(ns), controle de estoque %s",
        sale.id, total, len(lines), "ligado" if track_stock else "desligado",
    )
    return load_sale(db, sale.id)

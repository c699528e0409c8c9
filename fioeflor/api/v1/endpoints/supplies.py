# fioeflor/api/v1/endpoints/supplies.py
# type: ignore

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from fioeflor.core.config import DEFAULT_STEM_UNIT_COST
from fioeflor.core.errors import ConflictError, NotFoundError
from fioeflor.database import get_db
from fioeflor.models.inventory import MaterialSupply, Supply, SupplyCategory
from fioeflor.schemas.inventory import (
    StockAdjustment,
    StockAdjustmentResult,
    StockMovementOut,
    SupplyCreate,
    SupplyDetail,
    SupplyInDB,
    SupplyUpdate,
)
from fioeflor.services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)

router = APIRouter()


def default_unit_cost(category: SupplyCategory):
    """Custo padrão: valor fixo para hastes, zero para o resto."""
    return DEFAULT_STEM_UNIT_COST if category == SupplyCategory.STEM else 0


def get_supply_or_404(supply_id: UUID, db: Session) -> Supply:
    supply = db.get(Supply, supply_id)
    if not supply:
        raise NotFoundError("Insumo não encontrado")
    return supply


# ***************************************************************
# 1. Listar Insumos (GET)
# ***************************************************************
@router.get("", response_model=List[SupplyInDB])
def read_supplies(db: Session = Depends(get_db)):
    supplies = db.query(Supply).order_by(Supply.name.asc()).all()
    return [SupplyInDB.model_validate(s) for s in supplies]


# ***************************************************************
# 2. Ler Insumo por ID (GET /{supply_id})
# ***************************************************************
@router.get("/{supply_id}", response_model=SupplyDetail)
def read_supply(supply_id: UUID, db: Session = Depends(get_db)):
    """Obtém um insumo com os materiais que o utilizam."""
    supply = (
        db.query(Supply)
        .options(selectinload(Supply.material_links).selectinload(MaterialSupply.material))
        .filter(Supply.id == supply_id)
        .first()
    )
    if not supply:
        raise NotFoundError("Insumo não encontrado")
    return SupplyDetail.model_validate(supply)


# ***************************************************************
# 3. Criar Insumo (POST)
# ***************************************************************
@router.post("", response_model=SupplyInDB, status_code=status.HTTP_201_CREATED)
def create_supply(supply_in: SupplyCreate, db: Session = Depends(get_db)):
    data = supply_in.model_dump()
    if data["unit_cost"] is None:
        data["unit_cost"] = default_unit_cost(supply_in.category)

    db_supply = Supply(**data)
    db.add(db_supply)
    db.commit()
    db.refresh(db_supply)
    logger.info("Insumo '%s' criado com %s %s", db_supply.name, db_supply.stock, db_supply.unit)

    return SupplyInDB.model_validate(db_supply)


# ***************************************************************
# 4. Atualizar Insumo (PUT /{supply_id})
# ***************************************************************
@router.put("/{supply_id}", response_model=SupplyInDB)
def update_supply(supply_id: UUID, supply_in: SupplyUpdate, db: Session = Depends(get_db)):
    """Atualiza os campos informados de um insumo."""
    db_supply = get_supply_or_404(supply_id, db)

    update_data = supply_in.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if value is not None:
            setattr(db_supply, key, value)

    try:
        db.add(db_supply)
        db.commit()
    except StaleDataError:
        db.rollback()
        raise ConflictError("Insumo alterado por outra operação; recarregue e tente novamente.")
    db.refresh(db_supply)

    return SupplyInDB.model_validate(db_supply)


# ***************************************************************
# 5. Remover Insumo (DELETE /{supply_id})
# ***************************************************************
@router.delete("/{supply_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supply(supply_id: UUID, db: Session = Depends(get_db)):
    """Remove um insumo. Bloqueado se algum material ou produto o utiliza."""
    db_supply = get_supply_or_404(supply_id, db)

    try:
        db.delete(db_supply)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Remoção do insumo %s bloqueada: ainda em uso", supply_id)
        raise ConflictError("Insumo em uso por materiais ou produtos; remova os vínculos antes.")

    return


# ***************************************************************
# 6. Ajustes manuais de estoque (PATCH)
# ***************************************************************
def _adjustment_response(supply, movement) -> StockAdjustmentResult:
    return StockAdjustmentResult(
        supply=SupplyInDB.model_validate(supply),
        movement=StockMovementOut(
            type=movement.type.value,
            quantity=movement.quantity,
            reason=movement.reason,
        ),
    )


@router.patch("/{supply_id}/adicionar-estoque", response_model=StockAdjustmentResult)
def add_stock(supply_id: UUID, adjustment: StockAdjustment, db: Session = Depends(get_db)):
    """Entrada de estoque (compra de insumos, devolução...)."""
    supply, movement = StockLedger(db).increment(supply_id, adjustment.quantity, adjustment.reason)
    db.commit()
    db.refresh(supply)
    return _adjustment_response(supply, movement)


@router.patch("/{supply_id}/remover-estoque", response_model=StockAdjustmentResult)
def remove_stock(supply_id: UUID, adjustment: StockAdjustment, db: Session = Depends(get_db)):
    """Saída manual de estoque (perda, uso interno...)."""
    supply, movement = StockLedger(db).decrement_with_reason(supply_id, adjustment.quantity, adjustment.reason)
    db.commit()
    db.refresh(supply)
    return _adjustment_response(supply, movement)

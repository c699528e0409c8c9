# fioeflor/api/v1/endpoints/materials.py
# type: ignore

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from fioeflor.core.errors import ConflictError, NotFoundError
from fioeflor.database import get_db
from fioeflor.models.inventory import Material, MaterialSupply, Supply
from fioeflor.schemas.inventory import MaterialCreate, MaterialInDB, MaterialUpdate, SupplyLinkIn

router = APIRouter()


def load_material(material_id: UUID, db: Session) -> Material:
    material = (
        db.query(Material)
        .options(selectinload(Material.supply_links).selectinload(MaterialSupply.supply))
        .filter(Material.id == material_id)
        .first()
    )
    if not material:
        raise NotFoundError("Material não encontrado")
    return material


def build_supply_links(links: List[SupplyLinkIn], db: Session) -> List[MaterialSupply]:
    """Valida os insumos referenciados e monta a composição na ordem recebida."""
    result = []
    for position, link in enumerate(links):
        if db.get(Supply, link.supply_id) is None:
            raise NotFoundError(f"Insumo {link.supply_id} não encontrado")
        result.append(MaterialSupply(supply_id=link.supply_id, quantity=link.quantity, position=position))
    return result


# ***************************************************************
# 1. Listar Materiais (GET)
# ***************************************************************
@router.get("", response_model=List[MaterialInDB])
def read_materials(db: Session = Depends(get_db)):
    materials = (
        db.query(Material)
        .options(selectinload(Material.supply_links).selectinload(MaterialSupply.supply))
        .order_by(Material.name.asc())
        .all()
    )
    return [MaterialInDB.model_validate(m) for m in materials]


# ***************************************************************
# 2. Ler Material por ID (GET /{material_id})
# ***************************************************************
@router.get("/{material_id}", response_model=MaterialInDB)
def read_material(material_id: UUID, db: Session = Depends(get_db)):
    return MaterialInDB.model_validate(load_material(material_id, db))


# ***************************************************************
# 3. Criar Material (POST)
# ***************************************************************
@router.post("", response_model=MaterialInDB, status_code=status.HTTP_201_CREATED)
def create_material(material_in: MaterialCreate, db: Session = Depends(get_db)):
    """Cria um material e a sua composição de insumos."""
    db_material = Material(
        name=material_in.name,
        description=material_in.description,
        supply_links=build_supply_links(material_in.supplies, db),
    )

    db.add(db_material)
    db.commit()

    return MaterialInDB.model_validate(load_material(db_material.id, db))


# ***************************************************************
# 4. Atualizar Material (PUT /{material_id})
# ***************************************************************
@router.put("/{material_id}", response_model=MaterialInDB)
def update_material(material_id: UUID, material_in: MaterialUpdate, db: Session = Depends(get_db)):
    """Atualiza nome/descrição; a lista de insumos, se enviada, substitui a atual."""
    db_material = load_material(material_id, db)
    update_data = material_in.model_dump(exclude_unset=True)

    if update_data.get("name") is not None:
        db_material.name = update_data["name"]
    if "description" in update_data:
        db_material.description = update_data["description"]
    if material_in.supplies is not None:
        db_material.supply_links = build_supply_links(material_in.supplies, db)

    db.add(db_material)
    db.commit()

    return MaterialInDB.model_validate(load_material(material_id, db))


# ***************************************************************
# 5. Remover Material (DELETE /{material_id})
# ***************************************************************
@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_material(material_id: UUID, db: Session = Depends(get_db)):
    """Remove um material. Bloqueado se algum produto o utiliza."""
    db_material = load_material(material_id, db)

    try:
        db.delete(db_material)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Material em uso por produtos; remova os vínculos antes.")

    return

# fioeflor/api/v1/endpoints/products.py
# type: ignore

from decimal import Decimal
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from fioeflor.core.errors import ConflictError, NotFoundError
from fioeflor.database import get_db
from fioeflor.models.inventory import (
    Material,
    MaterialSupply,
    Product,
    ProductMaterial,
    ProductSupply,
    Supply,
)
from fioeflor.schemas.inventory import (
    MaterialLinkIn,
    ProductCreate,
    ProductInDB,
    ProductUpdate,
    SupplyLinkIn,
    SupplyRequirementOut,
)
from fioeflor.services import composition

router = APIRouter()

# ***************************************************************
# DEPENDÊNCIAS / AUXILIARES DE PRODUTOS
# ***************************************************************

def _with_links(query):
    return query.options(
        selectinload(Product.supply_links).selectinload(ProductSupply.supply),
        selectinload(Product.material_links)
        .selectinload(ProductMaterial.material)
        .selectinload(Material.supply_links)
        .selectinload(MaterialSupply.supply),
    )


def get_product_or_404(product_id: UUID, db: Session) -> Product:
    """Busca um produto por ID com os vínculos de composição."""
    product = _with_links(db.query(Product)).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Produto não encontrado")
    return product


def build_material_links(links: List[MaterialLinkIn], db: Session) -> List[ProductMaterial]:
    result = []
    for link in links:
        if db.get(Material, link.material_id) is None:
            raise NotFoundError(f"Material {link.material_id} não encontrado")
        result.append(ProductMaterial(material_id=link.material_id, quantity=link.quantity))
    return result


def build_supply_links(links: List[SupplyLinkIn], db: Session) -> List[ProductSupply]:
    result = []
    for link in links:
        if db.get(Supply, link.supply_id) is None:
            raise NotFoundError(f"Insumo {link.supply_id} não encontrado")
        result.append(ProductSupply(supply_id=link.supply_id, quantity=link.quantity))
    return result


# ***************************************************************
# 1. Endpoint para Criar Produto (POST)
# ***************************************************************
@router.post("", response_model=ProductInDB, status_code=status.HTTP_201_CREATED)
def create_product(product_in: ProductCreate, db: Session = Depends(get_db)):
    """Cria um produto com os materiais e insumos diretos que o compõem."""
    db_product = Product(
        name=product_in.name,
        description=product_in.description,
        price=product_in.price,
        cost=product_in.cost,
        images=list(product_in.images),
        material_links=build_material_links(product_in.materials, db),
        supply_links=build_supply_links(product_in.supplies, db),
    )

    db.add(db_product)
    db.commit()

    return ProductInDB.model_validate(get_product_or_404(db_product.id, db))


# ***************************************************************
# 2. Endpoint para Listar Produtos (GET)
# ***************************************************************
@router.get("", response_model=List[ProductInDB])
def read_products(db: Session = Depends(get_db)):
    """Lista os produtos, mais recentes primeiro."""
    products = _with_links(db.query(Product)).order_by(Product.created_at.desc()).all()
    return [ProductInDB.model_validate(p) for p in products]


# ***************************************************************
# 3. Endpoint para Ler Produto por ID (GET /{product_id})
# ***************************************************************
@router.get("/{product_id}", response_model=ProductInDB)
def read_product(product_id: UUID, db: Session = Depends(get_db)):
    return ProductInDB.model_validate(get_product_or_404(product_id, db))


# ***************************************************************
# 4. Pré-visualizar consumo de insumos (GET /{product_id}/requisitos)
# ***************************************************************
@router.get("/{product_id}/requisitos", response_model=List[SupplyRequirementOut])
def read_product_requirements(
    product_id: UUID,
    quantity: Decimal = Query(Decimal("1"), alias="quantidade", gt=0, description="Quantidade de produtos"),
    db: Session = Depends(get_db),
):
    """Insumos consumidos por ``quantity`` unidades, um item por caminho de composição."""
    requirements = composition.resolve(db, product_id, quantity)
    return [SupplyRequirementOut.model_validate(r) for r in requirements]


# ***************************************************************
# 5. Endpoint para Atualizar Produto (PUT /{product_id})
# ***************************************************************
@router.put("/{product_id}", response_model=ProductInDB)
def update_product(product_id: UUID, product_in: ProductUpdate, db: Session = Depends(get_db)):
    """Atualiza campos de um produto; listas de vínculos enviadas substituem as atuais."""
    db_product = get_product_or_404(product_id, db)

    update_data = product_in.model_dump(exclude_unset=True, exclude={"materials", "supplies"})
    for key, value in update_data.items():
        if key == "description" or value is not None:
            setattr(db_product, key, value)

    if product_in.materials is not None:
        db_product.material_links = build_material_links(product_in.materials, db)
    if product_in.supplies is not None:
        db_product.supply_links = build_supply_links(product_in.supplies, db)

    db.add(db_product)
    db.commit()

    return ProductInDB.model_validate(get_product_or_404(product_id, db))


# ***************************************************************
# 6. Endpoint para Remover Produto (DELETE /{product_id})
# ***************************************************************
@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: UUID, db: Session = Depends(get_db)):
    """Remove um produto. Bloqueado se já constar em alguma venda."""
    db_product = get_product_or_404(product_id, db)

    try:
        db.delete(db_product)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Produto já vendido não pode ser removido.")

    return

"""Expansão de um produto nos insumos que ele consome.

Um produto consome insumos por dois caminhos: vínculos diretos
(produto -> insumo) e vínculos via material (produto -> material -> insumo).
Cada caminho gera um requisito independente; o mesmo insumo pode aparecer
mais de uma vez.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from fioeflor.core.errors import InvalidQuantityError, NotFoundError
from fioeflor.models.inventory import Material, MaterialSupply, Product, ProductMaterial, ProductSupply


@dataclass(frozen=True)
class SupplyRequirement:
    supply_id: UUID
    supply_name: str
    unit: str
    required_quantity: Decimal
    # Nome do material quando o requisito vem de um caminho via material
    material_name: Optional[str] = None


def load_product(db: Session, product_id: UUID) -> Product:
    product = (
        db.query(Product)
        .options(
            selectinload(Product.supply_links).selectinload(ProductSupply.supply),
            selectinload(Product.material_links)
            .selectinload(ProductMaterial.material)
            .selectinload(Material.supply_links)
            .selectinload(MaterialSupply.supply),
        )
        .filter(Product.id == product_id)
        .first()
    )
    if product is None:
        raise NotFoundError(f"Produto {product_id} não encontrado")
    return product


def expand_product(product: Product, requested_quantity) -> List[SupplyRequirement]:
    """Requisitos de um produto já carregado: diretos primeiro, depois via material."""
    quantity = Decimal(requested_quantity)
    if quantity <= 0:
        raise InvalidQuantityError()

    requirements = []

    for link in product.supply_links:
        requirements.append(
            SupplyRequirement(
                supply_id=link.supply_id,
                supply_name=link.supply.name,
                unit=link.supply.unit,
                required_quantity=link.quantity * quantity,
            )
        )

    for material_link in product.material_links:
        material = material_link.material
        for supply_link in material.supply_links:
            requirements.append(
                SupplyRequirement(
                    supply_id=supply_link.supply_id,
                    supply_name=supply_link.supply.name,
                    unit=supply_link.supply.unit,
                    required_quantity=supply_link.quantity * material_link.quantity * quantity,
                    material_name=material.name,
                )
            )

    return requirements


def resolve(db: Session, product_id: UUID, requested_quantity) -> List[SupplyRequirement]:
    """Carrega o produto e devolve a lista achatada de requisitos por caminho."""
    product = load_product(db, product_id)
    return expand_product(product, requested_quantity)

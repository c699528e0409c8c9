# fioeflor/models/inventory.py
# type: ignore

import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, TIMESTAMP, Column, Enum, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from fioeflor.database import Base


# Escala das colunas de quantidade (Numeric(12, 3))
QUANTITY_SCALE = Decimal("0.001")


def utcnow() -> datetime:
    """Data/hora atual em UTC, sem tzinfo (formato gravado no banco)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SupplyCategory(str, enum.Enum):
    """Categorias de insumo usadas na interface."""

    STEM = "Haste"
    WIRE = "Ferro"
    WRAPPING = "Embrulho"
    OTHER = "Outros"


# ***************************************************************
# 1. Supply (Insumo / matéria-prima)
# ***************************************************************
class Supply(Base):
    """Insumo com estoque próprio. É o único registro decrementado por vendas."""
    __tablename__ = "supply"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)

    # NUMERIC(12,3) para frações de metro, grama, etc.
    stock = Column(Numeric(12, 3), nullable=False, default=0)
    unit = Column(String(50), nullable=False)
    category = Column(
        Enum(SupplyCategory, values_callable=lambda e: [c.value for c in e], native_enum=False),
        nullable=False,
        default=SupplyCategory.OTHER,
    )
    unit_cost = Column(Numeric(10, 2), nullable=False, default=0)

    # Incrementada a cada escrita de estoque; a baixa só grava se ainda for a versão lida
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(TIMESTAMP, default=utcnow)

    __mapper_args__ = {"version_id_col": version}

    # Materiais que usam este insumo (somente leitura; a remoção é bloqueada pela FK)
    material_links = relationship("MaterialSupply", back_populates="supply", passive_deletes="all")


# ***************************************************************
# 2. Material (composto de insumos)
# ***************************************************************
class Material(Base):
    __tablename__ = "material"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, default=utcnow)

    # Composição de uma unidade de material, na ordem de cadastro
    supply_links = relationship(
        "MaterialSupply",
        back_populates="material",
        cascade="all, delete-orphan",
        order_by="MaterialSupply.position",
    )
    product_links = relationship("ProductMaterial", back_populates="material", passive_deletes="all")


class MaterialSupply(Base):
    """Quantidade de um insumo por unidade de material."""
    __tablename__ = "material_supply"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    material_id = Column(Uuid, ForeignKey("material.id", ondelete="CASCADE"), nullable=False)
    supply_id = Column(Uuid, ForeignKey("supply.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    material = relationship("Material", back_populates="supply_links")
    supply = relationship("Supply", back_populates="material_links")


# ***************************************************************
# 3. Product (produto final vendido)
# ***************************************************************
class Product(Base):
    __tablename__ = "product"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # NUMERIC(10,2) para precisão financeira
    price = Column(Numeric(10, 2), nullable=False)
    cost = Column(Numeric(10, 2), nullable=False, default=0)

    # Lista de URLs/caminhos de imagens
    images = Column(JSON, nullable=False, default=list)

    created_at = Column(TIMESTAMP, default=utcnow)

    material_links = relationship("ProductMaterial", back_populates="product", cascade="all, delete-orphan")
    supply_links = relationship("ProductSupply", back_populates="product", cascade="all, delete-orphan")


class ProductMaterial(Base):
    """Quantidade de um material por unidade de produto."""
    __tablename__ = "product_material"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey("product.id", ondelete="CASCADE"), nullable=False)
    material_id = Column(Uuid, ForeignKey("material.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)

    product = relationship("Product", back_populates="material_links")
    material = relationship("Material", back_populates="product_links")


class ProductSupply(Base):
    """Insumo consumido diretamente pelo produto, sem passar por material."""
    __tablename__ = "product_supply"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid, ForeignKey("product.id", ondelete="CASCADE"), nullable=False)
    supply_id = Column(Uuid, ForeignKey("supply.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)

    product = relationship("Product", back_populates="supply_links")
    supply = relationship("Supply")

# fioeflor/schemas/inventory.py
# type: ignore

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer

from fioeflor.core.config import LOW_STOCK_THRESHOLD, MEDIUM_STOCK_THRESHOLD
from fioeflor.models.inventory import SupplyCategory

# Entrada: nomes em português (alias) aceitos também pelo nome do campo.
INPUT_CONFIG = ConfigDict(populate_by_name=True)
# Saída: lida a partir dos objetos ORM; o alias em português vale nos dois sentidos.
OUTPUT_CONFIG = ConfigDict(from_attributes=True, populate_by_name=True)

# -------------------------------------------------------------------
# Insumos (Supply)
# -------------------------------------------------------------------

class SupplyCreate(BaseModel):
    model_config = INPUT_CONFIG

    name: str = Field(..., alias="nome", min_length=3, max_length=255)
    stock: Decimal = Field(..., alias="estoque", ge=0, decimal_places=3)
    unit: str = Field(..., alias="unidade", min_length=1, max_length=50)
    category: SupplyCategory = Field(SupplyCategory.OTHER, alias="categoria")
    # Sem valor: custo padrão para "Haste", zero para as demais categorias
    unit_cost: Optional[Decimal] = Field(None, alias="custoUnitario", ge=0, decimal_places=2)


class SupplyUpdate(BaseModel):
    model_config = INPUT_CONFIG

    name: Optional[str] = Field(None, alias="nome", min_length=3, max_length=255)
    stock: Optional[Decimal] = Field(None, alias="estoque", ge=0, decimal_places=3)
    unit: Optional[str] = Field(None, alias="unidade", min_length=1, max_length=50)
    category: Optional[SupplyCategory] = Field(None, alias="categoria")
    unit_cost: Optional[Decimal] = Field(None, alias="custoUnitario", ge=0, decimal_places=2)


class StockAdjustment(BaseModel):
    """Corpo de adicionar-estoque / remover-estoque.

    O sinal da quantidade é validado pelo livro de estoque (InvalidQuantity para <= 0).
    """
    model_config = INPUT_CONFIG

    quantity: Decimal = Field(..., alias="quantidade", decimal_places=3)
    reason: Optional[str] = Field(None, alias="motivo", max_length=255)


class SupplySummary(BaseModel):
    model_config = OUTPUT_CONFIG

    id: UUID
    name: str = Field(alias="nome")
    unit: str = Field(alias="unidade")


class SupplyInDB(BaseModel):
    model_config = OUTPUT_CONFIG

    id: UUID
    name: str = Field(alias="nome")
    stock: Decimal = Field(alias="estoque")
    unit: str = Field(alias="unidade")
    category: SupplyCategory = Field(alias="categoria")
    unit_cost: Decimal = Field(alias="custoUnitario")

    @computed_field(alias="nivelEstoque")
    @property
    def stock_level(self) -> str:
        if self.stock < LOW_STOCK_THRESHOLD:
            return "baixo"
        if self.stock < MEDIUM_STOCK_THRESHOLD:
            return "medio"
        return "alto"

    # Serializador: converte Decimal em float na saída JSON
    @field_serializer("stock", "unit_cost")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class StockMovementOut(BaseModel):
    model_config = OUTPUT_CONFIG

    type: str = Field(alias="tipo")
    quantity: Decimal = Field(alias="quantidade")
    reason: Optional[str] = Field(None, alias="motivo")

    @field_serializer("quantity")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class StockAdjustmentResult(BaseModel):
    """Insumo atualizado mais a movimentação (efêmera) que o alterou."""
    model_config = OUTPUT_CONFIG

    supply: SupplyInDB = Field(alias="insumo")
    movement: StockMovementOut = Field(alias="movimentacao")

# -------------------------------------------------------------------
# Materiais
# -------------------------------------------------------------------

class SupplyLinkIn(BaseModel):
    model_config = INPUT_CONFIG

    supply_id: UUID = Field(..., alias="insumoId")
    quantity: Decimal = Field(..., alias="quantidade", gt=0, decimal_places=3)


class MaterialCreate(BaseModel):
    model_config = INPUT_CONFIG

    name: str = Field(..., alias="nome", min_length=3, max_length=255)
    description: Optional[str] = Field(None, alias="descricao")
    supplies: List[SupplyLinkIn] = Field(default_factory=list, alias="insumos")


class MaterialUpdate(BaseModel):
    model_config = INPUT_CONFIG

    name: Optional[str] = Field(None, alias="nome", min_length=3, max_length=255)
    description: Optional[str] = Field(None, alias="descricao")
    # Quando informado, substitui a composição inteira
    supplies: Optional[List[SupplyLinkIn]] = Field(None, alias="insumos")


class SupplyLinkOut(BaseModel):
    model_config = OUTPUT_CONFIG

    supply_id: UUID = Field(alias="insumoId")
    quantity: Decimal = Field(alias="quantidade")
    supply: SupplySummary = Field(alias="insumo")

    @field_serializer("quantity")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class MaterialSummary(BaseModel):
    model_config = OUTPUT_CONFIG

    id: UUID
    name: str = Field(alias="nome")
    description: Optional[str] = Field(None, alias="descricao")


class MaterialInDB(MaterialSummary):
    supply_links: List[SupplyLinkOut] = Field(default_factory=list, alias="insumos")


class MaterialUsage(BaseModel):
    """Material que usa um insumo (visto a partir do insumo)."""
    model_config = OUTPUT_CONFIG

    quantity: Decimal = Field(alias="quantidade")
    material: MaterialSummary

    @field_serializer("quantity")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class SupplyDetail(SupplyInDB):
    material_links: List[MaterialUsage] = Field(default_factory=list, alias="materiais")

# -------------------------------------------------------------------
# Produtos
# -------------------------------------------------------------------

class MaterialLinkIn(BaseModel):
    model_config = INPUT_CONFIG

    material_id: UUID = Field(..., alias="materialId")
    quantity: Decimal = Field(..., alias="quantidade", gt=0, decimal_places=3)


class ProductCreate(BaseModel):
    model_config = INPUT_CONFIG

    name: str = Field(..., alias="nome", min_length=3, max_length=255)
    description: Optional[str] = Field(None, alias="descricao")
    price: Decimal = Field(..., alias="preco", gt=0, decimal_places=2, description="Preço de venda")
    cost: Decimal = Field(Decimal("0"), alias="custo", ge=0, decimal_places=2, description="Custo de produção")
    images: List[str] = Field(default_factory=list, alias="imagens")
    materials: List[MaterialLinkIn] = Field(default_factory=list, alias="materiais")
    supplies: List[SupplyLinkIn] = Field(default_factory=list, alias="insumos")


class ProductUpdate(BaseModel):
    model_config = INPUT_CONFIG

    name: Optional[str] = Field(None, alias="nome", min_length=3, max_length=255)
    description: Optional[str] = Field(None, alias="descricao")
    price: Optional[Decimal] = Field(None, alias="preco", gt=0, decimal_places=2)
    cost: Optional[Decimal] = Field(None, alias="custo", ge=0, decimal_places=2)
    images: Optional[List[str]] = Field(None, alias="imagens")
    # Listas informadas substituem os vínculos existentes
    materials: Optional[List[MaterialLinkIn]] = Field(None, alias="materiais")
    supplies: Optional[List[SupplyLinkIn]] = Field(None, alias="insumos")


class MaterialLinkOut(BaseModel):
    model_config = OUTPUT_CONFIG

    material_id: UUID = Field(alias="materialId")
    quantity: Decimal = Field(alias="quantidade")
    material: MaterialInDB

    @field_serializer("quantity")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class ProductSummary(BaseModel):
    model_config = OUTPUT_CONFIG

    id: UUID
    name: str = Field(alias="nome")
    description: Optional[str] = Field(None, alias="descricao")
    price: Decimal = Field(alias="preco")
    cost: Decimal = Field(alias="custo")
    images: List[str] = Field(default_factory=list, alias="imagens")

    @computed_field(alias="lucroUnitario")
    @property
    def unit_profit(self) -> float:
        return float(self.price - self.cost)

    @computed_field(alias="margem")
    @property
    def margin(self) -> float:
        """Margem de lucro sobre o preço, em %, com uma casa decimal."""
        if self.price <= 0:
            return 0.0
        return round(float((self.price - self.cost) / self.price * 100), 1)

    @field_serializer("price", "cost")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class ProductInDB(ProductSummary):
    created_at: datetime = Field(alias="createdAt")
    material_links: List[MaterialLinkOut] = Field(default_factory=list, alias="materiais")
    supply_links: List[SupplyLinkOut] = Field(default_factory=list, alias="insumos")

    @field_serializer("created_at")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()


class SupplyRequirementOut(BaseModel):
    """Um requisito de insumo por caminho de composição."""
    model_config = OUTPUT_CONFIG

    supply_id: UUID = Field(alias="insumoId")
    supply_name: str = Field(alias="nome")
    unit: str = Field(alias="unidade")
    required_quantity: Decimal = Field(alias="quantidade")
    material_name: Optional[str] = Field(None, alias="material")

    @field_serializer("required_quantity")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)

# fioeflor/schemas/sales.py
# type: ignore

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer

from fioeflor.schemas.inventory import INPUT_CONFIG, OUTPUT_CONFIG, ProductSummary

# ***************************************************************
# 1. Schemas de CLIENTE
# ***************************************************************

class CustomerCreate(BaseModel):
    model_config = INPUT_CONFIG

    name: str = Field(..., alias="nome", min_length=3, max_length=255)
    phone: Optional[str] = Field(None, alias="telefone", max_length=50)
    address: Optional[str] = Field(None, alias="endereco", max_length=255)


class CustomerUpdate(BaseModel):
    model_config = INPUT_CONFIG

    name: Optional[str] = Field(None, alias="nome", min_length=3, max_length=255)
    phone: Optional[str] = Field(None, alias="telefone", max_length=50)
    address: Optional[str] = Field(None, alias="endereco", max_length=255)


class CustomerInDB(BaseModel):
    model_config = OUTPUT_CONFIG

    id: UUID
    name: str = Field(alias="nome")
    phone: Optional[str] = Field(None, alias="telefone")
    address: Optional[str] = Field(None, alias="endereco")

# ***************************************************************
# 2. Schemas de VENDA
# ***************************************************************

class SaleItemCreate(BaseModel):
    model_config = INPUT_CONFIG

    product_id: UUID = Field(..., alias="produtoId")
    quantity: int = Field(..., alias="quantidade", ge=1)
    # Sem valor: usa o preço atual do produto
    unit_price: Optional[Decimal] = Field(None, alias="precoUnit", gt=0, decimal_places=2)


class SaleCreate(BaseModel):
    model_config = INPUT_CONFIG

    customer_id: Optional[UUID] = Field(None, alias="clienteId")
    items: List[SaleItemCreate] = Field(..., alias="produtos", min_length=1)
    sold_at: Optional[datetime] = Field(None, alias="data")
    # Liga/desliga a baixa de insumos nesta venda
    track_stock: bool = Field(False, alias="controlarEstoque")


class SaleItemInDB(BaseModel):
    model_config = OUTPUT_CONFIG

    product_id: UUID = Field(alias="produtoId")
    quantity: int = Field(alias="quantidade")
    unit_price: Decimal = Field(alias="precoUnit")
    product: ProductSummary = Field(alias="produto")

    @field_serializer("unit_price")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class SaleSummary(BaseModel):
    model_config = OUTPUT_CONFIG

    id: UUID
    sold_at: datetime = Field(alias="data")
    total: Decimal = Field(alias="valorTotal")
    customer_id: Optional[UUID] = Field(None, alias="clienteId")

    @field_serializer("total")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)

    @field_serializer("sold_at")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()


class SaleInDB(SaleSummary):
    customer: Optional[CustomerInDB] = Field(None, alias="cliente")
    items: List[SaleItemInDB] = Field(default_factory=list, alias="produtos")


class CustomerDetail(CustomerInDB):
    sales: List[SaleSummary] = Field(default_factory=list, alias="vendas")

# ***************************************************************
# 3. Schemas de RELATÓRIOS
# ***************************************************************

class BestSellerId(BaseModel):
    model_config = OUTPUT_CONFIG

    product_id: UUID = Field(alias="produtoId")
    quantity: int = Field(alias="quantidade")


class SalesReport(BaseModel):
    model_config = OUTPUT_CONFIG

    total: Decimal = Field(alias="totalVendas")
    count: int = Field(alias="quantidadeVendas")
    sales: List[SaleInDB] = Field(alias="vendas")
    best_sellers: List[BestSellerId] = Field(alias="produtosMaisVendidos")

    @field_serializer("total")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class BestSeller(BaseModel):
    model_config = OUTPUT_CONFIG

    product: ProductSummary = Field(alias="produto")
    quantity: int = Field(alias="quantidade")


class DashboardStatistics(BaseModel):
    model_config = OUTPUT_CONFIG

    month_total: Decimal = Field(alias="totalVendasMes")
    product_count: int = Field(alias="totalProdutos")
    customer_count: int = Field(alias="totalClientes")
    recent_sales: List[SaleInDB] = Field(alias="vendasRecentes")
    best_sellers: List[BestSeller] = Field(alias="produtosMaisVendidos")

    @field_serializer("month_total")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)

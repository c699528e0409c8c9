# fioeflor/models/sales.py
# type: ignore

import uuid

from sqlalchemy import TIMESTAMP, Column, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from fioeflor.database import Base
from fioeflor.models.inventory import utcnow


# ***************************************************************
# 1. Customer (Cliente)
# ***************************************************************
class Customer(Base):
    __tablename__ = "customer"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    created_at = Column(TIMESTAMP, default=utcnow)

    # Ao remover o cliente, as vendas ficam sem cliente (customer_id = NULL)
    sales = relationship("Sale", back_populates="customer", order_by="Sale.sold_at.desc()")


# ***************************************************************
# 2. Sale (Venda) e seus itens
# ***************************************************************
class Sale(Base):
    """Venda registrada. Não há atualização: apenas criação e remoção."""
    __tablename__ = "sale"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    customer_id = Column(Uuid, ForeignKey("customer.id", ondelete="SET NULL"), nullable=True)
    sold_at = Column(TIMESTAMP, nullable=False, default=utcnow, index=True)

    # Σ quantidade × preço unitário dos itens
    total = Column(Numeric(10, 2), nullable=False)

    customer = relationship("Customer", back_populates="sales")
    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.position",
    )


class SaleItem(Base):
    __tablename__ = "sale_item"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sale_id = Column(Uuid, ForeignKey("sale.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid, ForeignKey("product.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)

    # Preço efetivamente cobrado (padrão: preço atual do produto)
    unit_price = Column(Numeric(10, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

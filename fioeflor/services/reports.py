"""Consultas agregadas de vendas (relatório por período e painel)."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from fioeflor.models.inventory import Product, utcnow
from fioeflor.models.sales import Customer, Sale, SaleItem


def _sales_query(db: Session):
    return db.query(Sale).options(
        joinedload(Sale.customer),
        selectinload(Sale.items).joinedload(SaleItem.product),
    )


def best_sellers(db: Session, limit: int, start: Optional[datetime] = None, end: Optional[datetime] = None):
    """Pares (product_id, quantidade vendida) em ordem decrescente."""
    total_quantity = func.sum(SaleItem.quantity).label("quantity")
    query = db.query(SaleItem.product_id, total_quantity).join(Sale, Sale.id == SaleItem.sale_id)
    if start is not None:
        query = query.filter(Sale.sold_at >= start)
    if end is not None:
        query = query.filter(Sale.sold_at <= end)
    return query.group_by(SaleItem.product_id).order_by(total_quantity.desc()).limit(limit).all()


def sales_report(db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None) -> dict:
    query = _sales_query(db)
    if start is not None:
        query = query.filter(Sale.sold_at >= start)
    if end is not None:
        query = query.filter(Sale.sold_at <= end)
    sales: List[Sale] = query.order_by(Sale.sold_at.desc()).all()

    return {
        "total": sum((sale.total for sale in sales), Decimal("0")),
        "count": len(sales),
        "sales": sales,
        "best_sellers": [
            {"product_id": product_id, "quantity": int(quantity)}
            for product_id, quantity in best_sellers(db, 10, start, end)
        ],
    }


def dashboard_statistics(db: Session, now: Optional[datetime] = None) -> dict:
    """Totais do mês corrente, contagens e vendas recentes para o painel."""
    now = now or utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    month_total = (
        db.query(func.coalesce(func.sum(Sale.total), 0))
        .filter(Sale.sold_at >= month_start)
        .scalar()
    )

    ranking = best_sellers(db, 5)
    products = {p.id: p for p in db.query(Product).filter(Product.id.in_([r[0] for r in ranking])).all()}

    return {
        "month_total": Decimal(str(month_total)).quantize(Decimal("0.01")),
        "product_count": db.query(func.count(Product.id)).scalar(),
        "customer_count": db.query(func.count(Customer.id)).scalar(),
        "recent_sales": _sales_query(db).order_by(Sale.sold_at.desc()).limit(5).all(),
        "best_sellers": [
            {"product": products[product_id], "quantity": int(quantity)}
            for product_id, quantity in ranking
            if product_id in products
        ],
    }

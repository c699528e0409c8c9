# fioeflor/api/v1/endpoints/sales.py
# type: ignore

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload, selectinload

from fioeflor.database import get_db
from fioeflor.models.sales import Sale, SaleItem
from fioeflor.schemas.sales import DashboardStatistics, SaleCreate, SaleInDB, SalesReport
from fioeflor.services import reports
from fioeflor.services.sales import create_sale, load_sale

router = APIRouter()


# ***************************************************************
# 1. Listar Vendas (GET)
# ***************************************************************
@router.get("", response_model=List[SaleInDB])
def read_sales(db: Session = Depends(get_db)):
    """Lista as vendas com cliente e produtos, mais recentes primeiro."""
    sales = (
        db.query(Sale)
        .options(
            joinedload(Sale.customer),
            selectinload(Sale.items).joinedload(SaleItem.product),
        )
        .order_by(Sale.sold_at.desc())
        .all()
    )
    return [SaleInDB.model_validate(s) for s in sales]


# ***************************************************************
# 2. Relatórios (declarados antes de /{sale_id})
# ***************************************************************
@router.get("/estatisticas", response_model=DashboardStatistics)
def read_statistics(db: Session = Depends(get_db)):
    """Números do painel: total do mês, contagens, vendas recentes e mais vendidos."""
    return DashboardStatistics.model_validate(reports.dashboard_statistics(db), from_attributes=True)


@router.get("/relatorio", response_model=SalesReport)
def read_report(
    start: Optional[datetime] = Query(None, alias="dataInicio"),
    end: Optional[datetime] = Query(None, alias="dataFim"),
    db: Session = Depends(get_db),
):
    """Total vendido no período e os 10 produtos mais vendidos."""
    return SalesReport.model_validate(reports.sales_report(db, start, end), from_attributes=True)


# ***************************************************************
# 3. Ler Venda por ID (GET /{sale_id})
# ***************************************************************
@router.get("/{sale_id}", response_model=SaleInDB)
def read_sale(sale_id: UUID, db: Session = Depends(get_db)):
    return SaleInDB.model_validate(load_sale(db, sale_id))


# ***************************************************************
# 4. Registrar Venda (POST)
# ***************************************************************
@router.post("", response_model=SaleInDB, status_code=status.HTTP_201_CREATED)
def register_sale(sale_in: SaleCreate, db: Session = Depends(get_db)):
    """Registra a venda e, com ``controlarEstoque``, baixa os insumos consumidos.

    - 404 se algum produto (ou o cliente) não existir.
    - 400 se faltar estoque de algum insumo; nada é gravado.
    """
    sale = create_sale(
        db,
        customer_id=sale_in.customer_id,
        items=sale_in.items,
        track_stock=sale_in.track_stock,
        sold_at=sale_in.sold_at,
    )
    return SaleInDB.model_validate(sale)


# ***************************************************************
# 5. Remover Venda (DELETE /{sale_id})
# ***************************************************************
@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(sale_id: UUID, db: Session = Depends(get_db)):
    """Remove a venda. O estoque de insumos NÃO é devolvido."""
    sale = load_sale(db, sale_id)
    db.delete(sale)
    db.commit()
    return

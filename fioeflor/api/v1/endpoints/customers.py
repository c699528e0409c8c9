# fioeflor/api/v1/endpoints/customers.py
# type: ignore

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, selectinload

from fioeflor.core.errors import NotFoundError
from fioeflor.database import get_db
from fioeflor.models.sales import Customer
from fioeflor.schemas.sales import CustomerCreate, CustomerDetail, CustomerInDB, CustomerUpdate

router = APIRouter()


def get_customer_or_404(customer_id: UUID, db: Session) -> Customer:
    customer = db.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Cliente não encontrado")
    return customer


@router.get("", response_model=List[CustomerInDB])
def read_customers(db: Session = Depends(get_db)):
    customers = db.query(Customer).order_by(Customer.name.asc()).all()
    return [CustomerInDB.model_validate(c) for c in customers]


@router.get("/{customer_id}", response_model=CustomerDetail)
def read_customer(customer_id: UUID, db: Session = Depends(get_db)):
    """Obtém um cliente com o histórico de vendas (mais recentes primeiro)."""
    customer = (
        db.query(Customer)
        .options(selectinload(Customer.sales))
        .filter(Customer.id == customer_id)
        .first()
    )
    if not customer:
        raise NotFoundError("Cliente não encontrado")
    return CustomerDetail.model_validate(customer)


@router.post("", response_model=CustomerInDB, status_code=status.HTTP_201_CREATED)
def create_customer(customer_in: CustomerCreate, db: Session = Depends(get_db)):
    db_customer = Customer(**customer_in.model_dump())
    db.add(db_customer)
    db.commit()
    db.refresh(db_customer)
    return CustomerInDB.model_validate(db_customer)


@router.put("/{customer_id}", response_model=CustomerInDB)
def update_customer(customer_id: UUID, customer_in: CustomerUpdate, db: Session = Depends(get_db)):
    db_customer = get_customer_or_404(customer_id, db)

    for key, value in customer_in.model_dump(exclude_unset=True).items():
        if key != "name" or value is not None:
            setattr(db_customer, key, value)

    db.add(db_customer)
    db.commit()
    db.refresh(db_customer)
    return CustomerInDB.model_validate(db_customer)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: UUID, db: Session = Depends(get_db)):
    """Remove o cliente; as vendas dele permanecem, sem cliente associado."""
    db_customer = get_customer_or_404(customer_id, db)
    db.delete(db_customer)
    db.commit()
    return

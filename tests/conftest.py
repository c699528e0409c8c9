"""Fixtures compartilhadas: banco SQLite em memória, cliente HTTP e fábricas."""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Callable, Iterator, Optional, Sequence, Tuple

# Configuração lida na importação do pacote; precisa vir antes dos imports abaixo.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_PASSWORD"] = "senha-de-teste"
os.environ["SECRET_KEY"] = "chave-de-teste"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from fioeflor.database import Base, get_db  # noqa: E402
from fioeflor.main import app  # noqa: E402
from fioeflor.models.inventory import (  # noqa: E402
    Material,
    MaterialSupply,
    Product,
    ProductMaterial,
    ProductSupply,
    Supply,
    SupplyCategory,
)
from fioeflor.models.sales import Customer  # noqa: E402

TEST_PASSWORD = "senha-de-teste"


@pytest.fixture
def engine():
    """Engine em memória com uma única conexão compartilhada (StaticPool)."""

    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory) -> Iterator[TestClient]:
    """Cliente HTTP sem autenticação, com ``get_db`` apontando para o banco de teste."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def api(client: TestClient) -> TestClient:
    """Cliente HTTP já autenticado com a senha da loja."""

    response = client.post("/api/auth/login", json={"password": TEST_PASSWORD})
    assert response.status_code == 200, response.text
    client.headers.update({"Authorization": f"Bearer {response.json()['access_token']}"})
    return client


# ---------------------------------------------------------------------------
# Fábricas de dados
# ---------------------------------------------------------------------------


@pytest.fixture
def supply_factory(db_session: Session) -> Callable[..., Supply]:
    def _create(
        name: str = "Arame",
        stock: str = "10",
        unit: str = "metros",
        category: SupplyCategory = SupplyCategory.WIRE,
        unit_cost: str = "0",
    ) -> Supply:
        supply = Supply(
            name=name,
            stock=Decimal(stock),
            unit=unit,
            category=category,
            unit_cost=Decimal(unit_cost),
        )
        db_session.add(supply)
        db_session.commit()
        db_session.refresh(supply)
        return supply

    return _create


@pytest.fixture
def material_factory(db_session: Session) -> Callable[..., Material]:
    def _create(name: str, supplies: Sequence[Tuple[Supply, str]] = ()) -> Material:
        material = Material(
            name=name,
            supply_links=[
                MaterialSupply(supply_id=supply.id, quantity=Decimal(qty), position=i)
                for i, (supply, qty) in enumerate(supplies)
            ],
        )
        db_session.add(material)
        db_session.commit()
        db_session.refresh(material)
        return material

    return _create


@pytest.fixture
def product_factory(db_session: Session) -> Callable[..., Product]:
    def _create(
        name: str,
        price: str = "50.00",
        cost: str = "20.00",
        materials: Sequence[Tuple[Material, str]] = (),
        supplies: Sequence[Tuple[Supply, str]] = (),
    ) -> Product:
        product = Product(
            name=name,
            price=Decimal(price),
            cost=Decimal(cost),
            images=[],
            material_links=[
                ProductMaterial(material_id=material.id, quantity=Decimal(qty))
                for material, qty in materials
            ],
            supply_links=[
                ProductSupply(supply_id=supply.id, quantity=Decimal(qty))
                for supply, qty in supplies
            ],
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _create


@pytest.fixture
def customer_factory(db_session: Session) -> Callable[..., Customer]:
    def _create(name: str = "Maria Souza", phone: Optional[str] = None) -> Customer:
        customer = Customer(name=name, phone=phone)
        db_session.add(customer)
        db_session.commit()
        db_session.refresh(customer)
        return customer

    return _create


@pytest.fixture
def bouquet(supply_factory, material_factory, product_factory):
    """Buquê: 1 Moldura (2 m de Arame cada) + 0,5 m de Arame direto. Arame: 10 m."""

    wire = supply_factory("Arame", stock="10", unit="metros")
    frame = material_factory("Moldura", supplies=[(wire, "2")])
    product = product_factory("Buquê", price="50.00", materials=[(frame, "1")], supplies=[(wire, "0.5")])
    return {"wire": wire, "frame": frame, "product": product}

"""Rotas de materiais, produtos e clientes."""

from __future__ import annotations

import uuid

import pytest

from fioeflor.models.sales import Sale


# ---------------------------------------------------------------------------
# Materiais
# ---------------------------------------------------------------------------


def test_create_material_keeps_supply_order(api, supply_factory):
    wire = supply_factory("Arame")
    ribbon = supply_factory("Fita cetim")

    response = api.post(
        "/api/materiais",
        json={
            "nome": "Moldura",
            "descricao": "Base de arame com fita",
            "insumos": [
                {"insumoId": str(ribbon.id), "quantidade": 0.5},
                {"insumoId": str(wire.id), "quantidade": 2},
            ],
        },
    )

    assert response.status_code == 201
    links = response.json()["insumos"]
    assert [(link["insumo"]["nome"], link["quantidade"]) for link in links] == [("Fita cetim", 0.5), ("Arame", 2.0)]


def test_create_material_with_unknown_supply_returns_404(api):
    response = api.post(
        "/api/materiais",
        json={"nome": "Moldura", "insumos": [{"insumoId": str(uuid.uuid4()), "quantidade": 1}]},
    )
    assert response.status_code == 404


@pytest.mark.parametrize("quantity", [0, 0.0004])
def test_invalid_material_link_quantity_is_rejected(api, supply_factory, quantity):
    wire = supply_factory()
    response = api.post(
        "/api/materiais",
        json={"nome": "Moldura", "insumos": [{"insumoId": str(wire.id), "quantidade": quantity}]},
    )
    assert response.status_code == 400


def test_update_material_replaces_composition(api, bouquet, supply_factory):
    paper = supply_factory("Papel seda", unit="folhas")

    body = api.put(
        f"/api/materiais/{bouquet['frame'].id}",
        json={"insumos": [{"insumoId": str(paper.id), "quantidade": 3}]},
    ).json()

    assert body["nome"] == "Moldura"
    assert [link["insumo"]["nome"] for link in body["insumos"]] == ["Papel seda"]


def test_delete_material_used_by_product_is_blocked(api, bouquet):
    response = api.delete(f"/api/materiais/{bouquet['frame'].id}")
    assert response.status_code == 409


def test_delete_unused_material(api, supply_factory, material_factory):
    material = material_factory("Laço", supplies=[(supply_factory(), "1")])

    assert api.delete(f"/api/materiais/{material.id}").status_code == 204
    assert api.get(f"/api/materiais/{material.id}").status_code == 404


# ---------------------------------------------------------------------------
# Produtos
# ---------------------------------------------------------------------------


def test_create_product_with_composition(api, bouquet):
    response = api.post(
        "/api/produtos",
        json={
            "nome": "Buquê grande",
            "preco": 80,
            "custo": 30,
            "imagens": ["https://exemplo.com/buque.jpg"],
            "materiais": [{"materialId": str(bouquet["frame"].id), "quantidade": 2}],
            "insumos": [{"insumoId": str(bouquet["wire"].id), "quantidade": 1}],
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["preco"] == 80
    assert body["lucroUnitario"] == 50
    assert body["margem"] == 62.5
    assert body["imagens"] == ["https://exemplo.com/buque.jpg"]
    assert body["materiais"][0]["material"]["nome"] == "Moldura"
    assert body["insumos"][0]["insumo"]["nome"] == "Arame"


@pytest.mark.parametrize(
    "payload",
    [
        {"nome": "Bu", "preco": 10},
        {"nome": "Buquê", "preco": 0},
        {"nome": "Buquê", "preco": 10, "custo": -1},
    ],
)
def test_invalid_product_payload_is_rejected(api, payload):
    response = api.post("/api/produtos", json=payload)
    assert response.status_code == 400
    assert response.json()["error"] == "Dados inválidos"


def test_product_margin_rounds_to_one_decimal(api, product_factory):
    product = product_factory("Cesta", price="30.00", cost="10.00")
    assert api.get(f"/api/produtos/{product.id}").json()["margem"] == 66.7


def test_products_are_listed(api, product_factory):
    product_factory("Primeiro")
    product_factory("Segundo")
    names = [p["nome"] for p in api.get("/api/produtos").json()]
    assert set(names) == {"Primeiro", "Segundo"}
    assert len(names) == 2


def test_requirements_preview_lists_each_path(api, bouquet):
    response = api.get(f"/api/produtos/{bouquet['product'].id}/requisitos", params={"quantidade": 3})

    assert response.status_code == 200
    wire_id = str(bouquet["wire"].id)
    assert response.json() == [
        {"insumoId": wire_id, "nome": "Arame", "unidade": "metros", "quantidade": 1.5, "material": None},
        {"insumoId": wire_id, "nome": "Arame", "unidade": "metros", "quantidade": 6.0, "material": "Moldura"},
    ]


def test_requirements_preview_for_unknown_product_returns_404(api):
    assert api.get(f"/api/produtos/{uuid.uuid4()}/requisitos").status_code == 404


def test_update_product_replaces_links_only_when_sent(api, bouquet):
    product_id = bouquet["product"].id

    body = api.put(f"/api/produtos/{product_id}", json={"preco": 55}).json()
    assert body["preco"] == 55
    assert len(body["materiais"]) == 1
    assert len(body["insumos"]) == 1

    body = api.put(f"/api/produtos/{product_id}", json={"insumos": []}).json()
    assert body["insumos"] == []
    assert len(body["materiais"]) == 1


def test_delete_product_never_sold(api, product_factory):
    product = product_factory("Cartão")
    assert api.delete(f"/api/produtos/{product.id}").status_code == 204
    assert api.get(f"/api/produtos/{product.id}").status_code == 404


def test_delete_product_already_sold_is_blocked(api, bouquet):
    product_id = str(bouquet["product"].id)
    api.post("/api/vendas", json={"produtos": [{"produtoId": product_id, "quantidade": 1}]})

    response = api.delete(f"/api/produtos/{product_id}")

    assert response.status_code == 409
    assert response.json() == {"error": "Produto já vendido não pode ser removido."}


# ---------------------------------------------------------------------------
# Clientes
# ---------------------------------------------------------------------------


def test_customer_crud(api):
    created = api.post("/api/clientes", json={"nome": "Joana Dias", "telefone": "11 99999-0000"})
    assert created.status_code == 201
    customer_id = created.json()["id"]

    updated = api.put(f"/api/clientes/{customer_id}", json={"endereco": "Rua das Flores, 10"}).json()
    assert updated["endereco"] == "Rua das Flores, 10"
    assert updated["telefone"] == "11 99999-0000"

    assert [c["nome"] for c in api.get("/api/clientes").json()] == ["Joana Dias"]


def test_customer_detail_includes_sales(api, bouquet, customer_factory):
    customer = customer_factory()
    api.post(
        "/api/vendas",
        json={"clienteId": str(customer.id), "produtos": [{"produtoId": str(bouquet["product"].id), "quantidade": 2}]},
    )

    body = api.get(f"/api/clientes/{customer.id}").json()

    assert len(body["vendas"]) == 1
    assert body["vendas"][0]["valorTotal"] == 100


def test_deleting_customer_keeps_their_sales(api, db_session, bouquet, customer_factory):
    customer = customer_factory()
    sale = api.post(
        "/api/vendas",
        json={"clienteId": str(customer.id), "produtos": [{"produtoId": str(bouquet["product"].id), "quantidade": 1}]},
    ).json()

    assert api.delete(f"/api/clientes/{customer.id}").status_code == 204

    db_session.expire_all()
    stored = db_session.get(Sale, uuid.UUID(sale["id"]))
    assert stored is not None
    assert stored.customer_id is None

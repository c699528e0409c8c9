"""Rotas de vendas: registro com controle de estoque, consultas e relatórios."""

from __future__ import annotations

import uuid
from datetime import timedelta
from decimal import Decimal

from fioeflor.models.inventory import Supply, utcnow
from fioeflor.models.sales import Sale


def _sale_payload(product, quantity=1, track_stock=True, **extra):
    payload = {
        "produtos": [{"produtoId": str(product.id), "quantidade": quantity}],
        "controlarEstoque": track_stock,
    }
    payload.update(extra)
    return payload


def _wire_stock(db_session, bouquet) -> Decimal:
    db_session.expire_all()
    return db_session.get(Supply, bouquet["wire"].id).stock


def test_register_sale_decrements_stock(api, db_session, bouquet):
    response = api.post("/api/vendas", json=_sale_payload(bouquet["product"], 3))

    assert response.status_code == 201
    body = response.json()
    assert body["valorTotal"] == 150
    assert body["cliente"] is None
    assert body["produtos"][0]["quantidade"] == 3
    assert body["produtos"][0]["precoUnit"] == 50
    assert body["produtos"][0]["produto"]["nome"] == "Buquê"
    assert _wire_stock(db_session, bouquet) == Decimal("2.5")


def test_register_sale_without_stock_control(api, db_session, bouquet):
    response = api.post("/api/vendas", json=_sale_payload(bouquet["product"], 5, track_stock=False))

    assert response.status_code == 201
    assert _wire_stock(db_session, bouquet) == Decimal("10")


def test_stock_control_is_off_by_default(api, db_session, bouquet):
    payload = {"produtos": [{"produtoId": str(bouquet["product"].id), "quantidade": 5}]}

    assert api.post("/api/vendas", json=payload).status_code == 201
    assert _wire_stock(db_session, bouquet) == Decimal("10")


def test_insufficient_stock_returns_400_and_records_nothing(api, db_session, bouquet):
    response = api.post("/api/vendas", json=_sale_payload(bouquet["product"], 5))

    assert response.status_code == 400
    assert response.json() == {
        "error": 'Estoque insuficiente do insumo "Arame" (material "Moldura"). '
        "Disponível: 10 metros, necessário: 12.5 metros"
    }
    assert _wire_stock(db_session, bouquet) == Decimal("10")
    assert db_session.query(Sale).count() == 0


def test_unknown_product_returns_404(api):
    product_id = uuid.uuid4()

    response = api.post(
        "/api/vendas", json={"produtos": [{"produtoId": str(product_id), "quantidade": 1}], "controlarEstoque": True}
    )

    assert response.status_code == 404
    assert response.json() == {"error": f"Produto {product_id} não encontrado"}


def test_unknown_customer_returns_404(api, bouquet):
    response = api.post("/api/vendas", json=_sale_payload(bouquet["product"], clienteId=str(uuid.uuid4())))
    assert response.status_code == 404


def test_sale_without_products_is_invalid(api):
    response = api.post("/api/vendas", json={"produtos": []})

    assert response.status_code == 400
    assert response.json()["error"] == "Dados inválidos"


def test_sale_item_quantity_must_be_at_least_one(api, bouquet):
    response = api.post("/api/vendas", json=_sale_payload(bouquet["product"], 0))
    assert response.status_code == 400


def test_custom_unit_price_and_date(api, bouquet):
    payload = _sale_payload(bouquet["product"], 2, track_stock=False, data="2024-03-08T14:00:00")
    payload["produtos"][0]["precoUnit"] = 42.5

    body = api.post("/api/vendas", json=payload).json()

    assert body["valorTotal"] == 85
    assert body["data"].startswith("2024-03-08T14:00:00")


def test_list_and_get_sale(api, bouquet, customer_factory):
    customer = customer_factory("Carla Mendes")
    created = api.post("/api/vendas", json=_sale_payload(bouquet["product"], clienteId=str(customer.id))).json()

    listed = api.get("/api/vendas").json()
    assert [s["id"] for s in listed] == [created["id"]]

    fetched = api.get(f"/api/vendas/{created['id']}").json()
    assert fetched["cliente"]["nome"] == "Carla Mendes"
    assert fetched["clienteId"] == str(customer.id)


def test_get_unknown_sale_returns_404(api):
    response = api.get(f"/api/vendas/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"error": "Venda não encontrada"}


def test_deleting_sale_does_not_restore_stock(api, db_session, bouquet):
    sale = api.post("/api/vendas", json=_sale_payload(bouquet["product"], 2)).json()

    assert api.delete(f"/api/vendas/{sale['id']}").status_code == 204
    assert api.get(f"/api/vendas/{sale['id']}").status_code == 404
    assert _wire_stock(db_session, bouquet) == Decimal("5")


def test_report_filters_by_period_and_ranks_products(api, bouquet, product_factory):
    card = product_factory("Cartão", price="5.00")
    old = (utcnow() - timedelta(days=60)).isoformat()

    api.post("/api/vendas", json=_sale_payload(card, 4, track_stock=False))
    api.post("/api/vendas", json=_sale_payload(bouquet["product"], 1, track_stock=False))
    api.post("/api/vendas", json=_sale_payload(bouquet["product"], 9, track_stock=False, data=old))

    full = api.get("/api/vendas/relatorio").json()
    assert full["quantidadeVendas"] == 3
    assert full["totalVendas"] == 20 + 50 + 450
    assert full["produtosMaisVendidos"][0] == {"produtoId": str(bouquet["product"].id), "quantidade": 10}

    start = (utcnow() - timedelta(days=7)).isoformat()
    recent = api.get("/api/vendas/relatorio", params={"dataInicio": start}).json()
    assert recent["quantidadeVendas"] == 2
    assert recent["totalVendas"] == 70
    assert recent["produtosMaisVendidos"][0] == {"produtoId": str(card.id), "quantidade": 4}


def test_dashboard_statistics(api, bouquet, customer_factory):
    customer_factory()
    api.post("/api/vendas", json=_sale_payload(bouquet["product"], 2, track_stock=False))

    body = api.get("/api/vendas/estatisticas").json()

    assert body["totalVendasMes"] == 100
    assert body["totalProdutos"] == 1
    assert body["totalClientes"] == 1
    assert len(body["vendasRecentes"]) == 1
    assert [(b["produto"]["nome"], b["quantidade"]) for b in body["produtosMaisVendidos"]] == [("Buquê", 2)]


def test_collection_path_without_trailing_slash_is_served_directly(api, bouquet):
    response = api.post("/api/vendas", json=_sale_payload(bouquet["product"]), follow_redirects=False)
    assert response.status_code == 201
    assert api.get("/api/vendas", follow_redirects=False).status_code == 200


def test_unit_price_with_more_than_two_decimals_is_rejected(api, db_session, bouquet):
    payload = {"produtos": [{"produtoId": str(bouquet["product"].id), "quantidade": 2, "precoUnit": 42.555}]}

    response = api.post("/api/vendas", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Dados inválidos"
    assert db_session.query(Sale).count() == 0

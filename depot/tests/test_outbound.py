from datetime import date

import pytest

from depot.services import outbound, stock_ledger
from depot.services.errors import InsufficientStock, InvalidArgument, NotFound
from depot.services.outbound import OutboundLineSpec
from depot.services.uow import transaction

SHIPPED = date(2026, 3, 15)


def _ship(db, wh_id, *specs):
    return outbound.create_full(
        db,
        warehouse_id=wh_id,
        shipped_date=SHIPPED,
        address="12 quai des Chartrons",
        lines=list(specs),
    )


# ---------- create_full ----------
def test_outbound_insufficient_stock(db_session, make_warehouse, make_product, put_stock, stock_of):
    """
    GIVEN stock 10
    WHEN  sortie de 12
    THEN  InsufficientStock, stock 10, aucune commande
    """
    wh = make_warehouse()
    p = make_product("WIDGET", size=1)
    put_stock(wh.id, p.id, 10)

    with pytest.raises(InsufficientStock):
        _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=12))

    assert stock_of(wh.id, p.id) == 10
    assert outbound.list_orders(db_session, wh.id) == []


def test_outbound_takes_stock(db_session, make_warehouse, make_product, put_stock, stock_of):
    wh = make_warehouse()
    a = make_product("A", size=1)
    b = make_product("B", size=1)
    put_stock(wh.id, a.id, 10)
    put_stock(wh.id, b.id, 3)

    created = _ship(
        db_session,
        wh.id,
        OutboundLineSpec(product_id=a.id, quantity=10),
        OutboundLineSpec(product_id=b.id, quantity=1),
    )

    assert len(created.line_ids) == 2
    assert stock_of(wh.id, a.id) == 0
    assert stock_of(wh.id, b.id) == 2
    [order] = outbound.list_orders(db_session, wh.id)
    assert order.id == created.order_id


def test_outbound_lines_share_running_balance(db_session, make_warehouse, make_product, put_stock, stock_of):
    """Deux lignes de 6 sur un stock de 10 : la seconde voit le solde de la première."""
    wh = make_warehouse()
    p = make_product("WIDGET", size=1)
    put_stock(wh.id, p.id, 10)

    with pytest.raises(InsufficientStock):
        _ship(
            db_session,
            wh.id,
            OutboundLineSpec(product_id=p.id, quantity=6),
            OutboundLineSpec(product_id=p.id, quantity=6),
        )

    assert stock_of(wh.id, p.id) == 10
    assert outbound.list_orders(db_session, wh.id) == []


def test_outbound_product_not_stocked(db_session, make_warehouse, make_product):
    wh = make_warehouse()
    p = make_product("GHOST")

    with pytest.raises(InsufficientStock):
        _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=1))


@pytest.mark.parametrize("qty", [0, -3])
def test_outbound_quantity_must_be_positive(db_session, make_warehouse, make_product, put_stock, stock_of, qty):
    wh = make_warehouse()
    p = make_product("WIDGET")
    put_stock(wh.id, p.id, 5)

    with pytest.raises(InvalidArgument):
        _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=qty))

    assert stock_of(wh.id, p.id) == 5


def test_outbound_empty_order_rejected(db_session, make_warehouse):
    wh = make_warehouse()

    with pytest.raises(InvalidArgument):
        _ship(db_session, wh.id)


def test_outbound_ignores_capacity(db_session, make_warehouse, make_product, put_stock, stock_of):
    # entrepôt déjà au-dessus de sa capacité : une sortie doit toujours passer
    wh = make_warehouse(capacity=10)
    p = make_product("WIDGET", size=5)
    put_stock(wh.id, p.id, 4)

    _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=1))

    assert stock_of(wh.id, p.id) == 3


# ---------- update_line_quantity ----------
def test_update_line_decrease_returns_stock(db_session, make_warehouse, make_product, put_stock, stock_of):
    wh = make_warehouse()
    p = make_product("WIDGET")
    put_stock(wh.id, p.id, 10)
    created = _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=6))

    updated = outbound.update_line_quantity(db_session, line_id=created.line_ids[0], quantity=2)

    assert updated.stock_change == 4
    assert updated.stock_after == 8
    assert updated.product_name == "WIDGET"
    assert stock_of(wh.id, p.id) == 8


def test_update_line_increase_takes_more(db_session, make_warehouse, make_product, put_stock, stock_of):
    wh = make_warehouse()
    p = make_product("WIDGET")
    put_stock(wh.id, p.id, 10)
    created = _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=6))

    updated = outbound.update_line_quantity(db_session, line_id=created.line_ids[0], quantity=9)

    assert updated.stock_change == -3
    assert stock_of(wh.id, p.id) == 1


def test_update_line_increase_beyond_stock(db_session, make_warehouse, make_product, put_stock, stock_of):
    wh = make_warehouse()
    p = make_product("WIDGET")
    put_stock(wh.id, p.id, 10)
    created = _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=6))

    with pytest.raises(InsufficientStock):
        outbound.update_line_quantity(db_session, line_id=created.line_ids[0], quantity=11)

    assert stock_of(wh.id, p.id) == 4
    [(line, _)] = outbound.list_lines(db_session, created.order_id)
    assert line.quantity == 6


def test_update_line_negative_quantity(db_session):
    with pytest.raises(InvalidArgument):
        outbound.update_line_quantity(db_session, line_id=1, quantity=-1)


def test_update_missing_line(db_session):
    with pytest.raises(NotFound):
        outbound.update_line_quantity(db_session, line_id=999, quantity=1)


# ---------- delete_line ----------
def test_delete_only_line_deletes_order(db_session, make_warehouse, make_product, put_stock, stock_of):
    """
    GIVEN commande de sortie avec une seule ligne de 3
    WHEN  suppression de la ligne
    THEN  stock +3, commande supprimée
    """
    wh = make_warehouse()
    p = make_product("WIDGET")
    put_stock(wh.id, p.id, 5)
    created = _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=3))
    assert stock_of(wh.id, p.id) == 2

    deleted = outbound.delete_line(db_session, line_id=created.line_ids[0])

    assert deleted.order_deleted is True
    assert stock_of(wh.id, p.id) == 5
    with pytest.raises(NotFound):
        outbound.get_order(db_session, created.order_id)


def test_delete_line_keeps_order_with_other_lines(db_session, make_warehouse, make_product, put_stock, stock_of):
    wh = make_warehouse()
    a = make_product("A")
    b = make_product("B")
    put_stock(wh.id, a.id, 5)
    put_stock(wh.id, b.id, 5)
    created = _ship(
        db_session,
        wh.id,
        OutboundLineSpec(product_id=a.id, quantity=1),
        OutboundLineSpec(product_id=b.id, quantity=2),
    )

    deleted = outbound.delete_line(db_session, line_id=created.line_ids[1])

    assert deleted.order_deleted is False
    assert stock_of(wh.id, b.id) == 5
    assert outbound.get_order(db_session, created.order_id).id == created.order_id


def test_delete_line_recreates_removed_stock_row(db_session, make_warehouse, make_product, put_stock, stock_of):
    wh = make_warehouse()
    p = make_product("WIDGET")
    put_stock(wh.id, p.id, 2)
    created = _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=2))
    with transaction(db_session):
        stock_ledger.delete(db_session, warehouse_id=wh.id, product_id=p.id)
    assert stock_of(wh.id, p.id) is None

    outbound.delete_line(db_session, line_id=created.line_ids[0])

    assert stock_of(wh.id, p.id) == 2


def test_ship_then_delete_restores_stock(db_session, make_warehouse, make_product, put_stock, stock_of):
    wh = make_warehouse()
    a = make_product("A")
    b = make_product("B")
    put_stock(wh.id, a.id, 8)
    put_stock(wh.id, b.id, 3)

    created = _ship(
        db_session,
        wh.id,
        OutboundLineSpec(product_id=a.id, quantity=5),
        OutboundLineSpec(product_id=b.id, quantity=3),
        OutboundLineSpec(product_id=a.id, quantity=3),
    )
    for line_id in created.line_ids:
        outbound.delete_line(db_session, line_id=line_id)

    assert stock_of(wh.id, a.id) == 8
    assert stock_of(wh.id, b.id) == 3


# ---------- update_header ----------
def test_update_header(db_session, make_warehouse, make_product, put_stock):
    wh = make_warehouse()
    p = make_product("A")
    put_stock(wh.id, p.id, 1)
    created = _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=1))

    order = outbound.update_header(
        db_session, order_id=created.order_id, shipped_date=date(2026, 4, 1), address="Dock 9"
    )

    assert order.address == "Dock 9"
    assert order.shipped_date == date(2026, 4, 1)


# ---------- aller-retour ----------
def test_edit_there_and_back_restores_stock(db_session, make_warehouse, make_product, put_stock, stock_of):
    """
    GIVEN stock 10, ligne de sortie de 3 (stock 7)
    WHEN  3 -> 8 -> 3
    THEN  stock revenu à 7
    """
    wh = make_warehouse()
    p = make_product("WIDGET")
    put_stock(wh.id, p.id, 10)
    created = _ship(db_session, wh.id, OutboundLineSpec(product_id=p.id, quantity=3))
    line_id = created.line_ids[0]

    outbound.update_line_quantity(db_session, line_id=line_id, quantity=8)
    assert stock_of(wh.id, p.id) == 2
    outbound.update_line_quantity(db_session, line_id=line_id, quantity=3)

    assert stock_of(wh.id, p.id) == 7

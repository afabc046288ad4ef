from decimal import Decimal

import pytest

from invadmin.domain.errors import TransportError
from invadmin.domain.models import Pagination, Product, ProductType, StockEntry
from invadmin.repositories.envelope import field_errors, parse_entity, parse_page, parse_product
from invadmin.repositories.resources import get_resource

BRANDS = get_resource("brands")

SHAPES = [
    {"pagination": {"data": [{"id": 1, "name": "A"}], "current_page": 2, "per_page": 5, "total_items": 11, "total_pages": 3}},
    {"data": [{"id": 1, "name": "A"}], "pagination": {"current_page": 2, "last_page": 3, "per_page": 5, "total": 11}},
    {"data": [{"id": 1, "name": "A"}], "current_page": 2, "per_page": 5, "total_items": 11, "total_pages": 3},
    {"data": [{"id": 1, "name": "A"}], "page": 2, "perPage": 5, "totalItems": 11, "totalPages": 3},
]


@pytest.mark.parametrize("body", SHAPES)
def test_every_envelope_shape_normalizes_to_the_same_page(body):
    page = parse_page(body, BRANDS, page=1, limit=10)
    assert [e.name for e in page.items] == ["A"]
    assert page.pagination == Pagination(current_page=2, per_page=5, total_items=11, total_pages=3)


def test_bare_list_falls_back_to_request_counters():
    page = parse_page([{"id": 1, "name": "A"}, {"id": 2, "name": "B"}], BRANDS, page=1, limit=10)
    assert page.pagination == Pagination(current_page=1, per_page=10, total_items=2, total_pages=1)


def test_unexpected_payload_is_a_transport_error():
    with pytest.raises(TransportError):
        parse_page("oops", BRANDS, page=1, limit=10)
    with pytest.raises(TransportError):
        parse_page({"data": {"id": 1}}, BRANDS, page=1, limit=10)


def test_total_pages_is_derived_from_counts():
    p = Pagination.build(current_page=4, per_page=10, total_items=95)
    assert p.total_pages == 10
    assert p.current_page == 4
    assert not p.contains(0)
    assert not p.contains(11)
    assert Pagination.build(current_page=3, per_page=10, total_items=0).current_page == 1


@pytest.mark.parametrize("raw,expected", [(True, "active"), (0, "inactive"), ("1", "active"), ("inactive", "inactive")])
def test_status_values_are_normalized(raw, expected):
    assert parse_entity({"id": 1, "name": "x", "status": raw}).status == expected


def test_entity_keeps_extra_fields_and_first_image():
    entity = parse_entity({"id": 3, "name": "Main", "address": "Dock 4", "images": ["a.png", "b.png"]})
    assert entity.extra == {"address": "Dock 4"}
    assert entity.image == "a.png"


def test_product_type_flag_wins_over_name_match():
    flagged = parse_product({"id": 1, "name": "TV", "product_type": {"id": 2, "name": "Gadgets", "is_electronic": 1}})
    named = parse_product({"id": 1, "name": "TV", "productType": {"id": 2, "name": "Home ELECTRONICS"}})
    opted_out = parse_product({"id": 1, "name": "TV", "product_type": {"id": 2, "name": "electronic", "is_electronic": False}})
    assert isinstance(flagged, Product) and isinstance(flagged.product_type, ProductType)
    assert flagged.is_electronic
    assert named.is_electronic
    assert not opted_out.is_electronic


def test_stock_page_parses_amounts_serials_and_names():
    body = {
        "current_page": 1,
        "per_page": 10,
        "total_items": 1,
        "total_pages": 1,
        "data": [
            {
                "id": 5,
                "product_id": 7,
                "quantity": 2,
                "buying_price": "10.50",
                "total_amount": "21.00",
                "paid_amount": "1",
                "due_amount": "20.00",
                "comission": "3",
                "status": "active",
                "product": {"id": 7, "name": "Phone"},
                "paymentType": {"id": 1, "name": "Cash"},
                "serialLists": [{"sku": "S1", "barcode": "11", "notes": "n"}, {"sku": "S2"}],
            }
        ],
    }
    entry = parse_page(body, get_resource("stocks"), page=1, limit=10).items[0]
    assert isinstance(entry, StockEntry)
    assert entry.buying_price == Decimal("10.50")
    assert entry.commission == Decimal("3")
    assert entry.product_name == "Phone"
    assert entry.payment_type_name == "Cash"
    assert [u.sku for u in entry.serial_units] == ["S1", "S2"]
    assert entry.serial_units[0].note == "n"


def test_field_errors_are_lists_of_strings():
    assert field_errors({"errors": {"name": ["Taken"], "email": "Invalid"}}) == {"name": ["Taken"], "email": ["Invalid"]}
    assert field_errors({"message": "x"}) == {}

from decimal import Decimal

import pytest

from invadmin.domain.errors import ValidationError
from invadmin.domain.models import Product, ProductType, SerialUnit, StockEntry
from invadmin.services.stock_calculator import FormMode
from invadmin.services.stock_form import StockEntryForm, record_payload
from invadmin.services.stock_service import StockService, attach_product_types

LAPTOP = Product(id=7, name="Laptop", product_type=ProductType(id=1, name="Consumer Electronics", is_electronic=True))
RICE = Product(id=8, name="Rice", product_type=ProductType(id=2, name="Grocery"))


class RecordingRepo:
    def __init__(self):
        self.calls = []

    def create(self, spec, payload, files=None):
        self.calls.append(("create", spec.key, payload))
        return {"message": "Stock and serials created successfully"}

    def update(self, spec, entity_id, payload, files=None):
        self.calls.append(("update", entity_id, payload))
        return {"message": "Stock updated successfully"}


def _entry(**overrides) -> StockEntry:
    base = dict(
        id=42,
        product_id=7,
        vendor_id=3,
        warehouse_id=2,
        payment_type_id=1,
        quantity=2,
        buying_price=Decimal("100.00"),
        tax=Decimal("5"),
        selling_price=Decimal("150.00"),
        total_amount=Decimal("180.00"),
        paid_amount=Decimal("100.00"),
        due_amount=Decimal("80.00"),
        stock_date="2025-01-10",
        serial_units=(SerialUnit("SN-1", "black"), SerialUnit("SN-2", "white")),
    )
    base.update(overrides)
    return StockEntry(**base)


def test_create_form_recomputes_on_every_change():
    form = StockEntryForm.for_create()
    form.select_product(RICE)
    form.set_field("quantity", "4")
    form.set_field("buying_price", "2.50")
    assert form.fields["total_amount"] == Decimal("10.00")
    assert form.fields["due_amount"] == Decimal("10.00")

    form.set_field("paid_amount", "7.25")
    assert form.fields["due_amount"] == Decimal("2.75")

    form.set_field("paid_amount", "50")
    assert form.fields["due_amount"] == Decimal("0.00")


def test_derived_fields_cannot_be_typed_in():
    form = StockEntryForm.for_create()
    with pytest.raises(ValidationError):
        form.set_field("total_amount", "999")


def test_electronic_product_expands_serial_inputs_with_quantity():
    form = StockEntryForm.for_create()
    form.set_field("quantity", 3)
    form.select_product(LAPTOP)
    assert len(form.serials) == 3

    form.set_serial(0, "sku", "SN-A")
    form.set_field("quantity", 5)
    assert len(form.serials) == 5
    assert form.serials.values("sku")[0] == "SN-A"

    form.set_field("quantity", 0)
    assert len(form.serials) == 5


def test_regular_product_never_resizes_serial_inputs():
    form = StockEntryForm.for_create()
    form.select_product(RICE)
    form.set_field("quantity", 12)
    assert len(form.serials) == 1


def test_submit_with_missing_sku_makes_no_network_call():
    repo = RecordingRepo()
    svc = StockService(repo)
    form = svc.open_create()
    form.select_product(LAPTOP)
    form.set_field("quantity", 3)
    for i, sku in enumerate(["A1", "", "C3"]):
        form.set_serial(i, "sku", sku)

    with pytest.raises(ValidationError) as err:
        svc.submit(form)

    assert err.value.code == "sku_required"
    assert "sku" in form.errors
    assert repo.calls == []


def test_submit_electronic_entry_sends_joined_serials():
    repo = RecordingRepo()
    svc = StockService(repo)
    form = svc.open_create()
    form.select_product(LAPTOP)
    form.set_field("quantity", 2)
    form.set_field("buying_price", "499.99")
    form.set_field("paid_amount", "500")
    form.set_field("warehouse_id", "4")
    form.set_serial(0, "sku", "SN-1")
    form.set_serial(1, "sku", "SN-2")
    form.set_serial(1, "barcode", "8800")

    message = svc.submit(form)

    assert message == "Stock and serials created successfully"
    action, resource, payload = repo.calls[0]
    assert (action, resource) == ("create", "stocks")
    assert payload["sku"] == "SN-1,SN-2"
    assert payload["bar_code"] == ",8800"
    assert payload["total_amount"] == "999.98"
    assert payload["due_amount"] == "499.98"
    assert payload["warehouse_id"] == 4
    assert "vendor_id" not in payload


def test_submit_regular_entry_sends_only_first_unit():
    repo = RecordingRepo()
    svc = StockService(repo)
    form = svc.open_create()
    form.select_product(RICE)
    form.set_field("quantity", 10)
    form.set_serial(0, "sku", "RICE-BATCH")

    svc.submit(form)

    payload = repo.calls[0][2]
    assert payload["sku"] == "RICE-BATCH"
    assert payload["quantity"] == 10


def test_product_is_required():
    form = StockEntryForm.for_create()
    with pytest.raises(ValidationError) as err:
        form.build_payload()
    assert "product_id" in err.value.field_errors


def test_edit_mode_keeps_snapshot_totals_and_serials():
    form = StockEntryForm.for_edit(_entry(), LAPTOP)
    assert form.mode is FormMode.EDIT

    form.set_field("quantity", 2)
    form.set_field("buying_price", "1.00")
    assert form.fields["total_amount"] == Decimal("180.00")
    assert form.fields["due_amount"] == Decimal("80.00")
    assert form.serials.values("sku") == ["SN-1", "SN-2"]


def test_edit_submit_uses_update_with_entry_id():
    repo = RecordingRepo()
    svc = StockService(repo)
    form = svc.open_edit(_entry(), products=[RICE, LAPTOP])
    assert form.product == LAPTOP

    assert svc.submit(form) == "Stock updated successfully"
    action, entity_id, payload = repo.calls[0]
    assert (action, entity_id) == ("update", 42)
    assert payload["total_amount"] == "180.00"
    assert payload["sku"] == "SN-1,SN-2"


def test_edit_quantity_change_without_matching_serials_is_rejected():
    repo = RecordingRepo()
    svc = StockService(repo)
    form = svc.open_edit(_entry(), products=[LAPTOP])
    form.set_field("quantity", 3)

    with pytest.raises(ValidationError) as err:
        svc.submit(form)
    assert err.value.code == "sku_count_mismatch"
    assert repo.calls == []


def test_record_payload_uses_backend_field_names():
    payload = record_payload(_entry(commission=Decimal("2.5")))
    assert payload["comission"] == "2.50"
    assert "sku" not in payload
    assert payload["status"] == "active"


def test_attach_product_types_resolves_by_id():
    plain = Product(id=1, name="TV", extra={"product_type_id": 9})
    typed = attach_product_types([plain], [ProductType(id=9, name="electronic", is_electronic=True)])
    assert typed[0].is_electronic


def test_product_catalog_marks_electronics_from_product_types(container, backend):
    backend.seed("/api/product-type", [{"id": 9, "name": "Consumer Electronics"}, {"id": 10, "name": "Food"}])
    backend.seed(
        "/api/products",
        [
            {"id": 20, "name": "TV", "product_type_id": 9},
            {"id": 21, "name": "Bread", "product_type_id": 10},
            {"id": 22, "name": "Phone", "product_type": {"id": 11, "name": "Gadgets", "is_electronic": True}},
        ],
    )

    products = {p.name: p for p in container.stocks.product_catalog()}

    assert products["TV"].is_electronic
    assert not products["Bread"].is_electronic
    assert products["Phone"].is_electronic
    assert [c["path"] for c in backend.calls] == ["/api/products", "/api/product-type"]
    assert backend.calls[0]["params"]["limit"] == 1000

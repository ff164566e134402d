import json

import pytest
from ordering.catalog import reset_catalog, set_catalog
from ordering.catalog.memory_adapter import InMemoryCatalog
from payments.gateway import reset_gateway, set_gateway
from payments.gateway.fake_adapter import FakeGateway
from protean.integrations.pytest import DomainFixture

BUYER = "buyer-001"
OTHER_BUYER = "buyer-002"
SELLER = "seller-001"
OTHER_SELLER = "seller-002"
ADMIN = "admin-001"

SHIPPING_DETAILS = {
    "name": "Asha Rao",
    "phone": "+91-9800000000",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "state": "KA",
    "postal_code": "560001",
    "country": "IN",
}


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def catalog():
    """Catalog with a plain product (stock 10) and a product with two variants.

    - prod-tee:   100.0, stock 10, sold by seller-001
    - prod-shirt: 500.0, sold by seller-002, variants
        var-shirt-m  550.0, stock 5
        var-shirt-l  (product price), stock 0
    """
    catalog = InMemoryCatalog()
    catalog.add_product("prod-tee", price=100.0, stock=10, seller_id=SELLER, name="Plain Tee")
    catalog.add_product("prod-shirt", price=500.0, stock=0, seller_id=OTHER_SELLER, name="Oxford Shirt")
    catalog.add_variant("prod-shirt", "var-shirt-m", stock=5, price=550.0, size="M")
    catalog.add_variant("prod-shirt", "var-shirt-l", stock=0, size="L")
    set_catalog(catalog)
    yield catalog
    reset_catalog()


@pytest.fixture(autouse=True)
def gateway():
    gateway = FakeGateway(secret="test_secret", key_id="rzp_test_key")
    set_gateway(gateway)
    yield gateway
    reset_gateway()


@pytest.fixture()
def shipping_details():
    return dict(SHIPPING_DETAILS)


@pytest.fixture()
def shipping_json():
    return json.dumps(SHIPPING_DETAILS)

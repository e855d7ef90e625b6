"""Entity declarations and database fixtures for sieveql tests (shared)."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from sieveql import Entity, Registry, ScalarKind, bootstrap, field, relation, sortable_field, where_field

from .models import Customer, Order, OrderItem, OrderStatus, Product


class CustomerFields(Entity):
    __entity_name__ = 'Customer'

    id = field(ScalarKind.ID)
    first_name = field()
    last_name = field()
    email = where_field()
    is_vip = field(bool)
    created_at = field(ScalarKind.DATE)
    orders = relation('Order', sortable=False)


class OrderFields(Entity):
    __entity_name__ = 'Order'

    id = field(ScalarKind.ID)
    status = field(ScalarKind.ENUM)
    total = field('number')
    note = field()
    placed_at = sortable_field(ScalarKind.DATE)
    customer = relation(CustomerFields)
    items = relation('OrderItem', sortable=False)


class OrderItemFields(Entity):
    __entity_name__ = 'OrderItem'

    id = field(ScalarKind.ID)
    quantity = field(int)
    product = relation('Product')


class ProductFields(Entity):
    __entity_name__ = 'Product'

    id = field(ScalarKind.ID)
    title = field()
    price = field(float)


ENTITIES = (CustomerFields, OrderFields, OrderItemFields, ProductFields)


def build_registry() -> Registry:
    return bootstrap(ENTITIES)


@pytest.fixture()
def registry() -> Registry:
    return build_registry()


BASE_TIME = datetime(2024, 3, 1, 12, 0, 0)


async def create_sample_data(session: AsyncSession):
    """Create and commit customers, orders, items and products with fixed timestamps."""
    alice = Customer(first_name="Alice", last_name="Johnson", email="alice@example.com", is_vip=True,
                     created_at=BASE_TIME - timedelta(days=30))
    bob = Customer(first_name="Bob", last_name="Smith", email="bob@example.com", is_vip=False,
                   created_at=BASE_TIME - timedelta(days=20))
    carol = Customer(first_name="Carol", last_name="Adams", email=None, is_vip=False,
                     created_at=BASE_TIME - timedelta(days=10))
    session.add_all([alice, bob, carol])
    await session.flush()

    espresso = Product(title="Espresso", price=2.5)
    cake = Product(title="Cheesecake", price=6.0)
    session.add_all([espresso, cake])
    await session.flush()

    orders = [
        Order(customer_id=alice.id, status=OrderStatus.ACTIVE, total=80.0, note="window seat",
              placed_at=BASE_TIME - timedelta(hours=5)),
        Order(customer_id=alice.id, status=OrderStatus.SHIPPED, total=12.5, note=None,
              placed_at=BASE_TIME - timedelta(hours=4)),
        Order(customer_id=bob.id, status=OrderStatus.ACTIVE, total=30.0, note=None,
              placed_at=BASE_TIME - timedelta(hours=3)),
        Order(customer_id=bob.id, status=OrderStatus.CANCELLED, total=55.0, note="refund",
              placed_at=BASE_TIME - timedelta(hours=2)),
        Order(customer_id=carol.id, status=OrderStatus.ACTIVE, total=6.0, note=None,
              placed_at=BASE_TIME - timedelta(hours=1)),
    ]
    session.add_all(orders)
    await session.flush()

    session.add_all([
        OrderItem(order_id=orders[0].id, product_id=cake.id, quantity=10),
        OrderItem(order_id=orders[0].id, product_id=espresso.id, quantity=8),
        OrderItem(order_id=orders[2].id, product_id=espresso.id, quantity=12),
        OrderItem(order_id=orders[4].id, product_id=cake.id, quantity=1),
    ])
    await session.commit()
    return {'customers': [alice, bob, carol], 'products': [espresso, cake], 'orders': orders}


@pytest.fixture(scope="function")
async def populated_db(db_session: AsyncSession):
    return await create_sample_data(db_session)

"""
Basic example of using sieveql with Strawberry GraphQL and SQLAlchemy.

This example demonstrates:
- Declaring sortable/filterable fields and bootstrapping a registry
- Generating GraphQL sort/where inputs for every entity
- Turning GraphQL arguments into find options
- Running the resulting statement with an async SQLAlchemy session

Run with: python examples/basic_example.py
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

import strawberry
from strawberry.types import Info
from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, relationship

from sieveql import Entity, ScalarKind, SieveConfig, assemble, bootstrap, field, relation
from sieveql.input_converter import input_to_filter, input_to_sort
from sieveql.input_types import InputTypeBuilder
from sieveql.sql import find_statement


# SQLAlchemy Models
class Base(DeclarativeBase):
    pass


class Customer(Base):
    __tablename__ = 'customers'

    id = Column(Integer, primary_key=True)
    last_name = Column(String(100), nullable=False)
    is_vip = Column(Boolean, default=False, nullable=False)

    orders = relationship("Order", back_populates="customer")


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True)
    status = Column(String(20), nullable=False)
    total = Column(Float, nullable=False)
    placed_at = Column(DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=False)

    customer = relationship("Customer", back_populates="orders")


# Field metadata: what clients may sort and filter on
class CustomerFields(Entity):
    __entity_name__ = 'Customer'

    id = field(ScalarKind.ID)
    last_name = field()
    is_vip = field(bool)
    orders = relation('Order', sortable=False)


class OrderFields(Entity):
    __entity_name__ = 'Order'

    id = field(ScalarKind.ID)
    status = field(ScalarKind.ENUM)
    total = field(ScalarKind.NUMBER)
    placed_at = field(ScalarKind.DATE)
    customer = relation(CustomerFields)


config = SieveConfig.from_env()
registry = bootstrap([CustomerFields, OrderFields], config=config)
inputs = InputTypeBuilder(registry).build()
OrderWhereInput = inputs.where_input('Order')
OrderSortOrder = inputs.sort_order('Order')


@strawberry.type
class OrderType:
    id: int
    status: str
    total: float
    customer_name: str


@strawberry.type
class Query:
    @strawberry.field
    async def orders(
        self,
        info: Info,
        where: Optional[OrderWhereInput] = None,
        order: Optional[OrderSortOrder] = None,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> List[OrderType]:
        options = assemble(
            {'skip': skip, 'take': take, 'order': input_to_sort(order), 'filter': input_to_filter(where)},
            sort_spec=registry.sort_spec('Order'),
            config=config,
        )
        session: AsyncSession = info.context['db_session']
        result = await session.execute(find_statement(Order, options, config=config))
        return [
            OrderType(id=o.id, status=o.status, total=o.total, customer_name=o.customer.last_name)
            for o in result.scalars().all()
        ]


schema = strawberry.Schema(query=Query)


async def main():
    logging.basicConfig(level=logging.INFO)
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)

    async with sessionmaker() as session:
        alice = Customer(last_name="Johnson", is_vip=True)
        bob = Customer(last_name="Smith", is_vip=False)
        session.add_all([alice, bob])
        await session.flush()
        session.add_all([
            Order(status="ACTIVE", total=80.0, customer_id=alice.id),
            Order(status="SHIPPED", total=12.5, customer_id=alice.id),
            Order(status="ACTIVE", total=30.0, customer_id=bob.id),
        ])
        await session.commit()

        query = """
        query {
          orders(
            where: { AND: [{ status: { eq: "ACTIVE" } }, { OR: [{ total: { gt: 50 } }, { customer: { is_vip: { eq: true } } }] }] }
            order: { customer: { last_name: ASC }, total: DESC }
            take: 10
          ) { id status total customerName }
        }
        """
        result = await schema.execute(query, context_value={'db_session': session})
        print(result.errors or result.data)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())

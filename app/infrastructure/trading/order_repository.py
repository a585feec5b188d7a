"""
Adapter: Order ledger.

Implements OrderRepository port on the ``orders`` table.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.engine import Connection, Row

from app.domain.trading.entities import Order, OrderSide, OrderStatus, OrderType
from app.domain.trading.ports import OrderRepository
from app.infrastructure.trading.tables import orders


def _to_order(row: Row) -> Order:
    return Order(
        id=row.id,
        owner_id=row.owner_id,
        ticker=row.ticker,
        side=OrderSide(row.side),
        quantity=row.quantity,
        price=row.price,
        total=row.total,
        fee=row.fee,
        order_type=OrderType(row.order_type),
        status=OrderStatus(row.status),
        filled_quantity=row.filled_quantity,
        average_fill_price=row.average_fill_price,
        commission=row.commission,
        executed_at=row.executed_at,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class OrderRepositoryAdapter(OrderRepository):
    """SQL implementation of the order ledger."""

    def __init__(self, connection: Connection) -> None:
        self._conn = connection

    def add(self, order: Order) -> None:
        self._conn.execute(
            orders.insert().values(
                id=order.id,
                owner_id=order.owner_id,
                ticker=order.ticker,
                side=order.side.value,
                quantity=order.quantity,
                price=order.price,
                total=order.total,
                order_type=order.order_type.value,
                status=order.status.value,
                filled_quantity=order.filled_quantity,
                average_fill_price=order.average_fill_price,
                fee=order.fee,
                commission=order.commission,
                executed_at=order.executed_at,
                notes=order.notes,
                created_at=order.created_at,
                updated_at=order.updated_at,
            )
        )

    def get_by_id(self, order_id: UUID) -> Optional[Order]:
        row = self._conn.execute(select(orders).where(orders.c.id == order_id)).first()
        return _to_order(row) if row is not None else None

    def save(self, order: Order) -> None:
        self._conn.execute(
            orders.update()
            .where(orders.c.id == order.id)
            .values(
                status=order.status.value,
                filled_quantity=order.filled_quantity,
                average_fill_price=order.average_fill_price,
                executed_at=order.executed_at,
                notes=order.notes,
                updated_at=order.updated_at,
            )
        )

    def list_by_owner(
        self,
        owner_id: UUID,
        status: Optional[OrderStatus] = None,
        side: Optional[OrderSide] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Order]:
        stmt = self._filtered(select(orders), owner_id, status, side)
        stmt = stmt.order_by(orders.c.created_at.desc()).limit(limit).offset(offset)
        return [_to_order(row) for row in self._conn.execute(stmt).fetchall()]

    def count_by_owner(
        self,
        owner_id: UUID,
        status: Optional[OrderStatus] = None,
        side: Optional[OrderSide] = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(orders), owner_id, status, side
        )
        return self._conn.execute(stmt).scalar_one()

    @staticmethod
    def _filtered(stmt, owner_id, status, side):
        stmt = stmt.where(orders.c.owner_id == owner_id)
        if status is not None:
            stmt = stmt.where(orders.c.status == status.value)
        if side is not None:
            stmt = stmt.where(orders.c.side == side.value)
        return stmt

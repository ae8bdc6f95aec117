"""Role-based visibility of records.

Back-office roles see every record. Brokers see the records they own.
Customers see the orders placed for their email address, along with the
delivery requests and communications attached to those orders.
"""

from fleet.identity.port import Role, User
from fleet.store import Collection, get_store

_BACK_OFFICE_ROLES = {Role.ADMIN, Role.SALES, Role.FINANCE}


def visibility_filter(viewer: User) -> dict:
    """Return the `where` clause that scopes order reads to `viewer`."""
    if viewer.role in _BACK_OFFICE_ROLES:
        return {}
    if viewer.role is Role.CUSTOMER:
        return {"customer_email": viewer.email}
    return {"user_id": viewer.id}


def can_see(viewer: User, order: dict) -> bool:
    return all(order.get(field) == value for field, value in visibility_filter(viewer).items())


def visible_records(viewer: User, collection: Collection, where=None, order_by=None) -> list[dict]:
    """List `collection` as `viewer` may see it.

    Customer-facing records other than orders carry the author's `user_id`,
    not the customer's, so a customer's view of them goes through the orders
    they can see.
    """
    store = get_store()
    where = dict(where or {})
    if collection is Collection.ORDERS or viewer.role is not Role.CUSTOMER:
        where.update(visibility_filter(viewer))
        return store.list(collection, where=where, order_by=order_by)

    order_ids = {order["id"] for order in store.list(Collection.ORDERS, where=visibility_filter(viewer))}
    return [
        record
        for record in store.list(collection, where=where, order_by=order_by)
        if record.get("order_id") in order_ids
    ]

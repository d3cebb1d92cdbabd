from typing import Any, Dict

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.errors import NotFound
from storefront.models.discount_code import DiscountCode
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.user import User
from storefront.utils.formatters import format_cents
from storefront.utils.pagination import paginate


def dashboard(session: Session) -> Dict[str, Any]:
    total_cents, sales_count = session.exec(
        select(
            func.coalesce(func.sum(Order.price_paid_in_cents), 0),
            func.count(Order.id),
        )
    ).one()

    user_count = session.exec(select(func.count(User.id))).one()

    active_count = session.exec(
        select(func.count(Product.id)).where(Product.is_available_for_purchase == True)  # noqa: E712
    ).one()
    inactive_count = session.exec(
        select(func.count(Product.id)).where(Product.is_available_for_purchase == False)  # noqa: E712
    ).one()

    return {
        "sales": {
            "amount": total_cents / 100,
            "number_of_sales": sales_count,
        },
        "customers": {
            "user_count": user_count,
            "average_value_per_user": 0 if user_count == 0 else total_cents / user_count / 100,
        },
        "products": {
            "active_count": active_count,
            "inactive_count": inactive_count,
        },
    }


# -------- ORDERS --------

def list_orders(session: Session, page: int = 1, limit: int = 20) -> Dict[str, Any]:
    query = (
        select(Order, Product.name, User.email, DiscountCode.code)
        .join(Product, Product.id == Order.product_id)
        .join(User, User.id == Order.user_id)
        .outerjoin(DiscountCode, DiscountCode.id == Order.discount_code_id)
        .order_by(Order.created_at.desc())
    )

    def serialize(row):
        order, product_name, email, code = row
        return {
            "id": order.id,
            "product": product_name,
            "customer": email,
            "price_paid_in_cents": order.price_paid_in_cents,
            "price_paid": format_cents(order.price_paid_in_cents),
            "discount_code": code,
            "created_at": order.created_at,
        }

    return paginate(session=session, query=query, page=page, limit=limit, serialize=serialize)


def delete_order(session: Session, order_id: str) -> Dict[str, str]:
    order = session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")

    deleted = {"id": order.id}
    session.delete(order)
    session.commit()
    return deleted


# -------- CUSTOMERS --------

def list_users(session: Session, page: int = 1, limit: int = 20) -> Dict[str, Any]:
    query = (
        select(
            User,
            func.count(Order.id),
            func.coalesce(func.sum(Order.price_paid_in_cents), 0),
        )
        .outerjoin(Order, Order.user_id == User.id)
        .group_by(User.id)
        .order_by(User.created_at.desc())
    )

    def serialize(row):
        user, order_count, value_in_cents = row
        return {
            "id": user.id,
            "email": user.email,
            "orders": order_count,
            "value": format_cents(value_in_cents),
            "created_at": user.created_at,
        }

    return paginate(session=session, query=query, page=page, limit=limit, serialize=serialize)


def delete_user(session: Session, user_id: str) -> Dict[str, str]:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    deleted = {"id": user.id, "email": user.email}
    # orders go with the user (cascade on User.orders)
    session.delete(user)
    session.commit()
    return deleted

"""
Pagination utility for API endpoints
"""
from flask import request
from sqlalchemy.orm import Query


def paginate(query: Query, page: int = None, per_page: int = None, default_per_page: int = 20, max_per_page: int = 100):
    """
    Paginate a SQLAlchemy query

    Args:
        query: SQLAlchemy query object
        page: Page number (1-indexed), defaults to the ``page`` request arg
        per_page: Items per page, defaults to the ``per_page`` request arg
        default_per_page: Used when neither argument nor request arg is given
        max_per_page: Maximum items per page allowed

    Returns:
        Dict with the page's items and pagination metadata
    """
    if page is None:
        page = request.args.get('page', 1, type=int)
    if per_page is None:
        per_page = request.args.get('per_page', default_per_page, type=int)

    per_page = max(1, min(per_page, max_per_page))
    page = max(page, 1)

    items = query.limit(per_page).offset((page - 1) * per_page).all()
    total = query.order_by(None).count()

    total_pages = (total + per_page - 1) // per_page
    has_next = page < total_pages
    has_prev = page > 1

    return {
        'items': items,
        'pagination': {
            'page': page,
            'per_page': per_page,
            'total': total,
            'total_pages': total_pages,
            'has_next': has_next,
            'has_prev': has_prev,
            'next_page': page + 1 if has_next else None,
            'prev_page': page - 1 if has_prev else None
        }
    }

"""
Shared list-query framework: pagination, sort and search validation, and the
``{meta, data}`` response envelope used by every list endpoint.

Each resource describes itself with a ``QueryPolicy``; the helpers below never
touch the database until every parameter has been validated.
"""

import math
from dataclasses import dataclass, field
from functools import reduce
from operator import or_
from typing import Callable, Dict, Optional, Tuple

from django.conf import settings
from django.db.models import Q, QuerySet

from campusdeals.exceptions import InvalidArgument

ALLOWED_ORDERS = ('asc', 'desc')


def _policy_setting(name):
    defaults = {
        'DEFAULT_PAGE': 1,
        'DEFAULT_LIMIT': 10,
        'MIN_PAGE': 1,
        'MIN_LIMIT': 1,
        'MAX_LIMIT': 100,
        'MAX_SEARCH_LENGTH': 100,
    }
    return getattr(settings, 'PAGINATION', {}).get(name, defaults[name])


@dataclass(frozen=True)
class QueryPolicy:
    """Per-resource allow-lists for sorting and searching."""

    allowed_sort_fields: Tuple[str, ...]
    default_sort_by: str = 'createdAt'
    default_order: str = 'desc'
    searchable_fields: Tuple[str, ...] = ()
    # Public sort name -> ORM field name
    sort_field_map: Dict[str, str] = field(default_factory=dict)

    def order_field(self, sort_by):
        return self.sort_field_map.get(sort_by, sort_by)


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int
    offset: int


def _coerce_int(value, name):
    if isinstance(value, bool):
        raise InvalidArgument(f'Invalid pagination parameters: {name} must be a number', field=name)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidArgument(f'Invalid pagination parameters: {name} must be a number', field=name)


def validate_pagination_params(page=None, limit=None, default_limit=None) -> PageParams:
    """
    Coerce and clamp raw page/limit values.

    Missing or blank values fall back to the defaults, the page is floored at
    the minimum page and the limit is clamped to ``[MIN_LIMIT, MAX_LIMIT]``.

    Raises:
        InvalidArgument: If a value is present but not an integer.
    """
    if default_limit is None:
        default_limit = _policy_setting('DEFAULT_LIMIT')

    if page is None or str(page).strip() == '':
        page = _policy_setting('DEFAULT_PAGE')
    if limit is None or str(limit).strip() == '':
        limit = default_limit

    page = max(_policy_setting('MIN_PAGE'), _coerce_int(page, 'page'))
    limit = min(_policy_setting('MAX_LIMIT'), max(_policy_setting('MIN_LIMIT'), _coerce_int(limit, 'limit')))

    return PageParams(page=page, limit=limit, offset=(page - 1) * limit)


def validate_sort_params(sort_by, order, policy: QueryPolicy):
    """Return ``(sort_by, order)`` after checking them against the policy."""
    if sort_by is None or str(sort_by).strip() == '':
        sort_by = policy.default_sort_by
    elif sort_by not in policy.allowed_sort_fields:
        raise InvalidArgument(
            f"Invalid sort field provided. Allowed: {', '.join(policy.allowed_sort_fields)}",
            field='sortBy',
        )

    if order is None or str(order).strip() == '':
        order = policy.default_order
    else:
        order = str(order).strip().lower()
        if order not in ALLOWED_ORDERS:
            raise InvalidArgument(
                f"Invalid sort order provided. Allowed: {', '.join(ALLOWED_ORDERS)}",
                field='order',
            )

    return sort_by, order


def sanitize_search(search):
    if not search or not isinstance(search, str):
        return ''
    return search.strip()[:_policy_setting('MAX_SEARCH_LENGTH')]


def build_search_filter(search, fields) -> Optional[Q]:
    """OR together case-insensitive ``contains`` lookups over ``fields``."""
    if not search or not fields:
        return None
    return reduce(or_, (Q(**{f'{name}__icontains': search}) for name in fields))


def parse_bool(value, name):
    """Parse a query-string boolean; ``None`` means the filter is absent."""
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    raise InvalidArgument(f'{name} must be true or false', field=name)


def parse_positive_int(value, name):
    if value is None or value == '':
        return None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidArgument(f'{name} must be a positive integer', field=name)
    if parsed <= 0:
        raise InvalidArgument(f'{name} must be a positive integer', field=name)
    return parsed


def paginate_queryset(
    queryset: QuerySet,
    params: PageParams,
    policy: QueryPolicy,
    sort_by: str,
    order: str,
    serialize: Callable,
    search: str = '',
    filters: Optional[dict] = None,
):
    """
    Order, slice and count ``queryset`` and wrap the page in the list envelope.

    ``id`` in the same direction is appended as a tie-break so pages stay
    stable when the primary sort field has duplicates.
    """
    sort_field = policy.order_field(sort_by)
    primary = sort_field if order == 'asc' else f'-{sort_field}'
    tiebreak = 'id' if order == 'asc' else '-id'
    ordering = [primary] if sort_field == 'id' else [primary, tiebreak]

    total = queryset.count()
    rows = list(queryset.order_by(*ordering)[params.offset:params.offset + params.limit])
    total_pages = math.ceil(total / params.limit) if total else 0

    return {
        'meta': {
            'total': total,
            'page': params.page,
            'limit': params.limit,
            'totalPages': total_pages,
            'hasNext': params.page < total_pages,
            'hasPrev': params.page > 1,
            'query': {
                'search': search or None,
                'sortBy': sort_by,
                'order': order,
                'filters': filters or None,
            },
        },
        'data': [serialize(row) for row in rows],
    }


def list_resource(queryset, policy: QueryPolicy, options, serialize, filter_builder=None, default_limit=None):
    """
    Validate raw list options and run a paginated query.

    ``options`` is a mapping with ``page``, ``limit``, ``sortBy``, ``order``,
    ``search`` and the resource's filter keys. ``filter_builder`` receives the
    raw options and returns ``(validated_filters, Q or None)``.
    """
    params = validate_pagination_params(options.get('page'), options.get('limit'), default_limit)
    sort_by, order = validate_sort_params(options.get('sortBy'), options.get('order'), policy)
    search = sanitize_search(options.get('search'))

    filters = {}
    if filter_builder is not None:
        filters, condition = filter_builder(options)
        if condition is not None:
            queryset = queryset.filter(condition)

    search_condition = build_search_filter(search, policy.searchable_fields)
    if search_condition is not None:
        queryset = queryset.filter(search_condition)

    return paginate_queryset(
        queryset, params, policy, sort_by, order, serialize, search=search, filters=filters
    )

"""User directory used by other apps to validate and enrich user references."""

import logging

from django.db.models import Q

from campusdeals.exceptions import NotFound
from campusdeals.pagination import QueryPolicy, list_resource, parse_bool

from .models import User
from .serializers import UserSerializer

logger = logging.getLogger(__name__)

USER_QUERY = QueryPolicy(
    allowed_sort_fields=("id", "name", "email", "phone", "role", "is_verified", "createdAt", "updatedAt"),
    default_sort_by="createdAt",
    searchable_fields=("name", "email", "phone"),
    sort_field_map={"createdAt": "created_at", "updatedAt": "updated_at"},
)


def get_user_by_id(user_id, label="User"):
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise NotFound(f"{label} not found")


def build_user_filters(options):
    filters = {}
    role = options.get("role")
    if role and isinstance(role, str) and role.strip():
        filters["role"] = role.strip()

    is_verified = parse_bool(options.get("is_verified"), "is_verified")
    if is_verified is not None:
        filters["is_verified"] = is_verified

    return filters, (Q(**filters) if filters else None)


def list_users(options):
    result = list_resource(
        User.objects.all(),
        USER_QUERY,
        options,
        lambda user: UserSerializer(user).data,
        filter_builder=build_user_filters,
    )
    logger.info(f"Listed {len(result['data'])} of {result['meta']['total']} users")
    return result

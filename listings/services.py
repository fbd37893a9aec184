"""Listing directory, campus and category management, and the list queries for all three."""

import logging
from decimal import Decimal, InvalidOperation as DecimalError

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils.text import slugify

from campusdeals.exceptions import Conflict, InvalidArgument, NotFound
from campusdeals.pagination import QueryPolicy, list_resource, parse_bool, parse_positive_int

from .models import Campus, Category, Listing
from .serializers import CampusSerializer, CategorySerializer, ListingSerializer

logger = logging.getLogger(__name__)

LISTING_QUERY = QueryPolicy(
    allowed_sort_fields=("id", "title", "price", "condition", "createdAt", "updatedAt"),
    default_sort_by="createdAt",
    searchable_fields=("title", "description"),
    sort_field_map={"createdAt": "created_at", "updatedAt": "updated_at"},
)

CAMPUS_QUERY = QueryPolicy(
    allowed_sort_fields=("id", "name", "slug", "createdAt", "updatedAt"),
    default_sort_by="createdAt",
    searchable_fields=("name", "slug"),
    sort_field_map={"createdAt": "created_at", "updatedAt": "updated_at"},
)

CATEGORY_QUERY = QueryPolicy(
    allowed_sort_fields=("id", "name", "slug", "createdAt", "updatedAt"),
    default_sort_by="createdAt",
    searchable_fields=("name", "slug", "description"),
    sort_field_map={"createdAt": "created_at", "updatedAt": "updated_at"},
)

CONDITIONS = tuple(value for value, _ in Listing.CONDITION_CHOICES)


def get_listing_by_id(listing_id):
    try:
        return Listing.objects.get(pk=listing_id)
    except Listing.DoesNotExist:
        raise NotFound("Listing not found")


def _parse_price(value, name):
    if value is None or value == "":
        return None
    try:
        price = Decimal(str(value).strip())
    except (DecimalError, ValueError):
        raise InvalidArgument(f"{name} must be a number", field=name)
    if not price.is_finite() or price < 0:
        raise InvalidArgument(f"{name} must be a non-negative number", field=name)
    return price


def build_listing_filters(options):
    """
    Validate listing filter options and build the matching condition.

    Unless ``isAvailable`` is given explicitly, only available listings match.
    """
    filters = {}

    category_id = parse_positive_int(options.get("categoryId"), "categoryId")
    if category_id is not None:
        filters["categoryId"] = category_id

    campus_id = parse_positive_int(options.get("campusId"), "campusId")
    if campus_id is not None:
        filters["campusId"] = campus_id

    condition = options.get("condition")
    if condition:
        if condition not in CONDITIONS:
            raise InvalidArgument(
                f"condition must be one of: {', '.join(CONDITIONS)}", field="condition"
            )
        filters["condition"] = condition

    is_available = parse_bool(options.get("isAvailable"), "isAvailable")
    if is_available is not None:
        filters["isAvailable"] = is_available

    price_min = _parse_price(options.get("priceMin"), "priceMin")
    price_max = _parse_price(options.get("priceMax"), "priceMax")
    if price_min is not None and price_max is not None and price_max < price_min:
        raise InvalidArgument("priceMax must be greater than or equal to priceMin", field="priceMax")
    if price_min is not None:
        filters["priceMin"] = str(price_min)
    if price_max is not None:
        filters["priceMax"] = str(price_max)

    condition_q = Q(is_available=filters.get("isAvailable", True))
    if "categoryId" in filters:
        condition_q &= Q(category_id=category_id)
    if "campusId" in filters:
        condition_q &= Q(campus_id=campus_id)
    if "condition" in filters:
        condition_q &= Q(condition=condition)
    if price_min is not None:
        condition_q &= Q(price__gte=price_min)
    if price_max is not None:
        condition_q &= Q(price__lte=price_max)

    return filters, condition_q


def _build_name_slug_filters(options):
    filters = {}
    for key in ("name", "slug"):
        value = options.get(key)
        if value and isinstance(value, str) and value.strip():
            filters[key] = value.strip()
    condition = Q(**{f"{key}__iexact": value for key, value in filters.items()}) if filters else None
    return filters, condition


def list_listings(options):
    result = list_resource(
        Listing.objects.all(),
        LISTING_QUERY,
        options,
        lambda listing: ListingSerializer(listing).data,
        filter_builder=build_listing_filters,
    )
    logger.info(f"Listings fetched successfully ({len(result['data'])} items)")
    return result


def list_campuses(options):
    return list_resource(
        Campus.objects.all(),
        CAMPUS_QUERY,
        options,
        lambda campus: CampusSerializer(campus).data,
        filter_builder=_build_name_slug_filters,
    )


def list_categories(options):
    return list_resource(
        Category.objects.all(),
        CATEGORY_QUERY,
        options,
        lambda category: CategorySerializer(category).data,
        filter_builder=_build_name_slug_filters,
    )


def _get_by(model, label, **lookup):
    try:
        return model.objects.get(**lookup)
    except model.DoesNotExist:
        raise NotFound(f"{label} not found")


def get_campus_by_id(campus_id):
    return _get_by(Campus, "Campus", pk=campus_id)


def get_campus_by_slug(slug):
    return _get_by(Campus, "Campus", slug=slug)


def get_category_by_id(category_id):
    return _get_by(Category, "Category", pk=category_id)


def get_category_by_slug(slug):
    return _get_by(Category, "Category", slug=slug)


def _check_name_and_slug_free(model, label, data, exclude_id=None):
    """Names are unique case-insensitively, slugs exactly"""
    queryset = model.objects.all()
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)

    slug = data.get("slug")
    if slug and queryset.filter(slug=slug).exists():
        raise Conflict(f"{label} with slug '{slug}' already exists")

    name = data.get("name")
    if name and queryset.filter(name__iexact=name).exists():
        raise Conflict(f"{label} with name '{name}' already exists")


def _save(instance, label):
    try:
        with transaction.atomic():
            instance.save()
    except IntegrityError:
        raise Conflict(f"{label} already exists")
    return instance


def _create(model, label, data):
    _check_name_and_slug_free(model, label, data)
    instance = _save(model(**data), label)
    logger.info(f"{label} created: {instance.slug}")
    return instance


def _update(instance, label, data):
    if not data:
        raise InvalidArgument(f"No {label.lower()} fields to update")

    _check_name_and_slug_free(type(instance), label, data, exclude_id=instance.pk)
    for key, value in data.items():
        setattr(instance, key, value)
    _save(instance, label)
    logger.info(f"{label} {instance.pk} updated successfully")
    return instance


def _delete(instance, label):
    summary = {"id": instance.pk, "name": instance.name, "slug": instance.slug}
    instance.delete()
    logger.info(f"{label} deleted: {summary['slug']}")
    return summary


def create_campus(data):
    return _create(Campus, "Campus", data)


def update_campus(campus_id, data):
    return _update(get_campus_by_id(campus_id), "Campus", data)


def delete_campus(campus_id):
    """Listings on the campus keep existing with no campus."""
    return _delete(get_campus_by_id(campus_id), "Campus")


def create_category(data):
    """The slug defaults to the slugified name."""
    data = dict(data)
    if not data.get("slug"):
        data["slug"] = slugify(data["name"])
        if not data["slug"]:
            raise InvalidArgument("Category slug could not be derived from the name", field="slug")
    return _create(Category, "Category", data)


def update_category(category_id, data):
    return _update(get_category_by_id(category_id), "Category", data)


def delete_category(category_id):
    return _delete(get_category_by_id(category_id), "Category")

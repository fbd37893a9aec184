"""Per-user saved listings."""

import logging

from django.db import IntegrityError, transaction

from campusdeals.exceptions import InvalidOperation, NotFound
from campusdeals.pagination import QueryPolicy, list_resource
from listings.services import get_listing_by_id
from users.services import get_user_by_id

from .models import Favorite
from .serializers import FavoriteListingSerializer

logger = logging.getLogger(__name__)

FAVORITE_QUERY = QueryPolicy(
    allowed_sort_fields=("id", "createdAt"),
    default_sort_by="createdAt",
    searchable_fields=("listing__title", "listing__description"),
    sort_field_map={"createdAt": "created_at"},
)


def add_favorite(user_id, listing_id):
    get_user_by_id(user_id)
    listing = get_listing_by_id(listing_id)

    if Favorite.objects.filter(user_id=user_id, listing=listing).exists():
        raise InvalidOperation("Listing is already in favorites")

    try:
        with transaction.atomic():
            favorite = Favorite.objects.create(user_id=user_id, listing=listing)
    except IntegrityError:
        raise InvalidOperation("Listing is already in favorites")

    logger.info(f"User {user_id} added listing {listing_id} to favorites")
    return favorite


def remove_favorite(user_id, listing_id):
    deleted, _ = Favorite.objects.filter(user_id=user_id, listing_id=listing_id).delete()
    if not deleted:
        raise NotFound("Favorite not found")

    logger.info(f"User {user_id} removed listing {listing_id} from favorites")


def list_favorites(user_id, options):
    result = list_resource(
        Favorite.objects.filter(user_id=user_id).select_related('listing'),
        FAVORITE_QUERY,
        options,
        lambda favorite: FavoriteListingSerializer(favorite).data,
    )
    logger.info(f"Retrieved {len(result['data'])} favorites for user {user_id}")
    return result

"""
Reviews between users.

Every create, update and delete recomputes the reviewee's rating tallies
inside the same transaction, so ``User.review_stats()`` always matches the
stored reviews.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from campusdeals.exceptions import Forbidden, InvalidArgument, InvalidOperation, NotFound
from campusdeals.pagination import QueryPolicy, list_resource
from users.models import User
from users.services import get_user_by_id

from .models import Review
from .serializers import ReviewSerializer

logger = logging.getLogger(__name__)

REVIEW_QUERY = QueryPolicy(
    allowed_sort_fields=("id", "rating", "createdAt", "updatedAt"),
    default_sort_by="createdAt",
    searchable_fields=("review",),
    sort_field_map={"createdAt": "created_at", "updatedAt": "updated_at"},
)

RATINGS = tuple(value for value, _ in Review.RATING_CHOICES)


def refresh_review_stats(user_id):
    counts = Review.objects.filter(reviewee_id=user_id).aggregate(
        positive=Count('id', filter=Q(rating='positive')),
        neutral=Count('id', filter=Q(rating='neutral')),
        negative=Count('id', filter=Q(rating='negative')),
    )
    User.objects.filter(pk=user_id).update(
        positive_count=counts['positive'],
        neutral_count=counts['neutral'],
        negative_count=counts['negative'],
    )
    return counts


def create_review(reviewer_id, reviewee_id, rating, review):
    if reviewer_id == reviewee_id:
        raise InvalidOperation("You cannot review yourself")

    get_user_by_id(reviewer_id, "Reviewer")
    get_user_by_id(reviewee_id, "Reviewee")

    with transaction.atomic():
        if Review.objects.filter(reviewer_id=reviewer_id, reviewee_id=reviewee_id).exists():
            raise InvalidOperation("You have already reviewed this user")
        try:
            with transaction.atomic():
                created = Review.objects.create(
                    reviewer_id=reviewer_id, reviewee_id=reviewee_id, rating=rating, review=review,
                )
        except IntegrityError:
            raise InvalidOperation("You have already reviewed this user")
        refresh_review_stats(reviewee_id)

    logger.info(f"Review {created.id} created by user {reviewer_id} for user {reviewee_id}")
    return created


def get_review_by_id(review_id):
    try:
        return Review.objects.get(pk=review_id)
    except Review.DoesNotExist:
        raise NotFound("Review not found")


def _own_review(review_id, user_id, action):
    review = get_review_by_id(review_id)
    if review.reviewer_id != user_id:
        raise Forbidden(f"Not allowed to {action} this review")
    return review


def update_review(review_id, user_id, data):
    if not data:
        raise InvalidArgument("No review fields to update")

    with transaction.atomic():
        review = _own_review(review_id, user_id, "update")
        for key, value in data.items():
            setattr(review, key, value)
        review.save()
        refresh_review_stats(review.reviewee_id)

    logger.info(f"Review {review_id} updated by user {user_id}")
    return review


def delete_review(review_id, user_id):
    with transaction.atomic():
        review = _own_review(review_id, user_id, "delete")
        deleted = ReviewSerializer(review).data
        review.delete()
        refresh_review_stats(review.reviewee_id)

    logger.info(f"Review {review_id} deleted by user {user_id}")
    return deleted


def build_review_filters(options):
    rating = options.get("rating")
    if not rating:
        return {}, None
    if rating not in RATINGS:
        raise InvalidArgument(f"rating must be one of: {', '.join(RATINGS)}", field="rating")
    return {"rating": rating}, Q(rating=rating)


def list_reviews_for_user(user_id, options):
    """Reviews received by a user plus the user's rating tallies."""
    user = get_user_by_id(user_id)
    result = list_resource(
        Review.objects.filter(reviewee=user),
        REVIEW_QUERY,
        options,
        lambda review: ReviewSerializer(review).data,
        filter_builder=build_review_filters,
    )
    result["stats"] = user.review_stats()
    logger.info(f"Retrieved {len(result['data'])} reviews for user {user_id}")
    return result

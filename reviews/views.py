from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from campusdeals.views import parse_path_id

from .serializers import ReviewCreateSerializer, ReviewSerializer, ReviewUpdateSerializer
from .services import create_review, delete_review, get_review_by_id, list_reviews_for_user, update_review


class UserReviewsView(APIView):
    """Reviews received by a user; any authenticated user may add one"""

    def get(self, request, user_id):
        result = list_reviews_for_user(parse_path_id(user_id, "user ID"), request.query_params)
        return Response({
            "message": "Reviews retrieved successfully",
            "meta": result["meta"],
            "stats": result["stats"],
            "data": result["data"],
        })

    def post(self, request, user_id):
        reviewee_id = parse_path_id(user_id, "user ID")
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = create_review(
            request.user.id,
            reviewee_id,
            serializer.validated_data['rating'],
            serializer.validated_data['review'],
        )
        return Response({
            "message": "Review created successfully",
            "data": ReviewSerializer(review).data,
        }, status=status.HTTP_201_CREATED)


class ReviewDetailView(APIView):
    """A single review; only its author may change or remove it"""

    def get(self, request, review_id):
        review = get_review_by_id(parse_path_id(review_id, "review ID"))
        return Response({
            "message": "Review retrieved successfully",
            "data": ReviewSerializer(review).data,
        })

    def put(self, request, review_id):
        review_id = parse_path_id(review_id, "review ID")
        serializer = ReviewUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = update_review(review_id, request.user.id, serializer.validated_data)
        return Response({
            "message": "Review updated successfully",
            "data": ReviewSerializer(review).data,
        })

    def delete(self, request, review_id):
        deleted = delete_review(parse_path_id(review_id, "review ID"), request.user.id)
        return Response({
            "message": "Review deleted successfully",
            "data": deleted,
        })

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from campusdeals.views import parse_path_id

from .serializers import FavoriteSerializer
from .services import add_favorite, list_favorites, remove_favorite


class FavoriteListView(APIView):
    """The authenticated user's saved listings"""

    def get(self, request):
        result = list_favorites(request.user.id, request.query_params)
        return Response({
            "message": "Favorites retrieved successfully",
            "meta": result["meta"],
            "data": result["data"],
        })


class FavoriteDetailView(APIView):

    def post(self, request, listing_id):
        favorite = add_favorite(request.user.id, parse_path_id(listing_id, "listing ID"))
        return Response({
            "message": "Listing added to favorites",
            "data": FavoriteSerializer(favorite).data,
        }, status=status.HTTP_201_CREATED)

    def delete(self, request, listing_id):
        remove_favorite(request.user.id, parse_path_id(listing_id, "listing ID"))
        return Response({"message": "Removed from favorites"})

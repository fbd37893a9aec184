from rest_framework.response import Response
from rest_framework.views import APIView

from campusdeals.views import parse_path_id

from .serializers import UserSerializer
from .services import get_user_by_id, list_users


class UserListView(APIView):
    """Paginated, searchable list of users"""

    def get(self, request):
        result = list_users(request.query_params)
        return Response({
            "message": "Users retrieved successfully",
            "meta": result["meta"],
            "data": result["data"],
        })


class UserDetailView(APIView):
    """Retrieves a user specified by ID"""

    def get(self, request, user_id):
        user = get_user_by_id(parse_path_id(user_id, "user ID"))
        return Response({
            "message": "User retrieved successfully",
            "data": UserSerializer(user).data,
        })

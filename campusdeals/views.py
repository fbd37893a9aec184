from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from campusdeals.exceptions import InvalidArgument


def parse_path_id(value, label="ID"):
    """Return a positive integer path id or raise InvalidArgument."""
    try:
        parsed = int(str(value))
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid {label}", field="id")
    if parsed <= 0:
        raise InvalidArgument(f"Invalid {label}", field="id")
    return parsed


class PingView(APIView):
    """Health check endpoint"""
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"message": "Bang"})

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from campusdeals.authentication import AdminWritePermissionMixin
from campusdeals.views import parse_path_id

from . import services
from .serializers import (
    CampusSerializer,
    CampusWriteSerializer,
    CategorySerializer,
    CategoryWriteSerializer,
    ListingSerializer,
)


class PaginatedListView(APIView):
    """Runs a list query and wraps it in the standard response envelope"""
    resource_name = None
    list_function = None

    def get(self, request):
        result = self.list_function(request.query_params)
        return Response({
            "message": f"{self.resource_name} retrieved successfully",
            "meta": result["meta"],
            "data": result["data"],
        })


class ManagedCollectionView(AdminWritePermissionMixin, PaginatedListView):
    """Paginated list for everyone; admins may also create"""
    resource_label = None
    write_serializer = None
    read_serializer = None
    create_function = None

    def post(self, request):
        serializer = self.write_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        instance = self.create_function(serializer.validated_data)
        return Response({
            "message": f"{self.resource_label} created successfully",
            "data": self.read_serializer(instance).data,
        }, status=status.HTTP_201_CREATED)


class ManagedDetailView(AdminWritePermissionMixin, APIView):
    """Retrieve by id for everyone; update and delete for admins"""
    resource_label = None
    lookup_url_kwarg = None
    write_serializer = None
    read_serializer = None
    get_function = None
    update_function = None
    delete_function = None

    def resource_id(self):
        return parse_path_id(self.kwargs[self.lookup_url_kwarg], f"{self.resource_label.lower()} ID")

    def get(self, request, **kwargs):
        instance = self.get_function(self.resource_id())
        return Response({
            "message": f"{self.resource_label} retrieved successfully",
            "data": self.read_serializer(instance).data,
        })

    def put(self, request, **kwargs):
        resource_id = self.resource_id()
        serializer = self.write_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        instance = self.update_function(resource_id, serializer.validated_data)
        return Response({
            "message": f"{self.resource_label} updated successfully",
            "data": self.read_serializer(instance).data,
        })

    def delete(self, request, **kwargs):
        deleted = self.delete_function(self.resource_id())
        return Response({
            "message": f"{self.resource_label} deleted successfully",
            "data": deleted,
        })


class SlugDetailView(APIView):
    resource_label = None
    read_serializer = None
    get_function = None

    def get(self, request, slug):
        instance = self.get_function(slug)
        return Response({
            "message": f"{self.resource_label} retrieved successfully",
            "data": self.read_serializer(instance).data,
        })


class ListingListView(PaginatedListView):
    resource_name = "Listings"
    list_function = staticmethod(services.list_listings)


class ListingDetailView(APIView):
    def get(self, request, listing_id):
        listing = services.get_listing_by_id(parse_path_id(listing_id, "listing ID"))
        return Response({
            "message": "Listing retrieved successfully",
            "data": ListingSerializer(listing).data,
        })


class CampusListView(ManagedCollectionView):
    resource_name = "Campuses"
    resource_label = "Campus"
    list_function = staticmethod(services.list_campuses)
    create_function = staticmethod(services.create_campus)
    write_serializer = CampusWriteSerializer
    read_serializer = CampusSerializer


class CampusDetailView(ManagedDetailView):
    resource_label = "Campus"
    lookup_url_kwarg = "campus_id"
    write_serializer = CampusWriteSerializer
    read_serializer = CampusSerializer
    get_function = staticmethod(services.get_campus_by_id)
    update_function = staticmethod(services.update_campus)
    delete_function = staticmethod(services.delete_campus)


class CampusSlugView(SlugDetailView):
    resource_label = "Campus"
    read_serializer = CampusSerializer
    get_function = staticmethod(services.get_campus_by_slug)


class CategoryListView(ManagedCollectionView):
    resource_name = "Categories"
    resource_label = "Category"
    list_function = staticmethod(services.list_categories)
    create_function = staticmethod(services.create_category)
    write_serializer = CategoryWriteSerializer
    read_serializer = CategorySerializer


class CategoryDetailView(ManagedDetailView):
    resource_label = "Category"
    lookup_url_kwarg = "category_id"
    write_serializer = CategoryWriteSerializer
    read_serializer = CategorySerializer
    get_function = staticmethod(services.get_category_by_id)
    update_function = staticmethod(services.update_category)
    delete_function = staticmethod(services.delete_category)


class CategorySlugView(SlugDetailView):
    resource_label = "Category"
    read_serializer = CategorySerializer
    get_function = staticmethod(services.get_category_by_slug)

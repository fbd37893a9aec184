from django.urls import path
from . import views

app_name = 'listings'

urlpatterns = [
    path('listings/', views.ListingListView.as_view(), name='listing-list'),
    path('listings/<str:listing_id>/', views.ListingDetailView.as_view(), name='listing-detail'),
    path('campuses/', views.CampusListView.as_view(), name='campus-list'),
    path('campuses/slug/<str:slug>/', views.CampusSlugView.as_view(), name='campus-slug'),
    path('campuses/<str:campus_id>/', views.CampusDetailView.as_view(), name='campus-detail'),
    path('categories/', views.CategoryListView.as_view(), name='category-list'),
    path('categories/slug/<str:slug>/', views.CategorySlugView.as_view(), name='category-slug'),
    path('categories/<str:category_id>/', views.CategoryDetailView.as_view(), name='category-detail'),
]

from django.urls import path
from . import views

app_name = 'favorites'

urlpatterns = [
    path('favorites/', views.FavoriteListView.as_view(), name='favorite-list'),
    path('favorites/<str:listing_id>/', views.FavoriteDetailView.as_view(), name='favorite-detail'),
]

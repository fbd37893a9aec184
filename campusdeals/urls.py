"""
URL configuration for campusdeals project.

Every route except ``ping/`` and ``admin/`` requires a bearer token.
"""
from django.contrib import admin
from django.urls import path, include
from . import views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('ping/', views.PingView.as_view(), name='ping'),
    path('users/', include('users.urls')),
    path('', include('listings.urls')),
    path('', include('conversations.urls')),
    path('', include('favorites.urls')),
    path('', include('reviews.urls')),
]

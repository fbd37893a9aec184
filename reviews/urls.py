from django.urls import path
from . import views

app_name = 'reviews'

urlpatterns = [
    path('users/<str:user_id>/reviews/', views.UserReviewsView.as_view(), name='user-reviews'),
    path('reviews/<str:review_id>/', views.ReviewDetailView.as_view(), name='review-detail'),
]

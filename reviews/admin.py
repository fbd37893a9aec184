from django.contrib import admin
from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['id', 'reviewer', 'reviewee', 'rating', 'created_at']
    list_filter = ['rating']
    search_fields = ['review']
    raw_id_fields = ['reviewer', 'reviewee']

from django.contrib import admin
from .models import Campus, Category, Listing


@admin.register(Campus)
class CampusAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'slug', 'created_at']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'slug', 'created_at']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'price', 'condition', 'seller', 'campus', 'category', 'is_available', 'created_at']
    list_filter = ['condition', 'is_available', 'campus', 'category']
    search_fields = ['title', 'description']
    raw_id_fields = ['seller']

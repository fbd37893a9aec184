from django.contrib import admin
from .models import Conversation, Message


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ['id', 'user1', 'user2', 'listing', 'last_message_at', 'created_at', 'updated_at']
    list_filter = ['created_at', 'updated_at']
    search_fields = ['last_message_content']
    raw_id_fields = ['user1', 'user2', 'listing']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'conversation', 'sender', 'receiver', 'content_preview', 'created_at', 'is_read']
    list_filter = ['is_read', 'created_at']
    search_fields = ['content']
    raw_id_fields = ['conversation', 'sender', 'receiver']
    readonly_fields = ['created_at', 'updated_at', 'read_at']

    @admin.display(description='Content Preview')
    def content_preview(self, obj):
        return obj.content[:50] + "..." if len(obj.content) > 50 else obj.content

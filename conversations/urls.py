from django.urls import path
from . import views

app_name = 'conversations'

urlpatterns = [
    path('messages/', views.MessageCreateView.as_view(), name='message-create'),
    path('messages/<str:message_id>/', views.MessageDeleteView.as_view(), name='message-delete'),
    path('conversations/', views.ConversationListView.as_view(), name='conversation-list'),
    path('conversations/<str:conversation_id>/', views.ConversationDetailView.as_view(), name='conversation-detail'),
    path('conversations/<str:conversation_id>/messages/', views.ConversationMessagesView.as_view(), name='conversation-messages'),
    path('conversations/<str:conversation_id>/read/', views.ConversationReadView.as_view(), name='conversation-read'),
]

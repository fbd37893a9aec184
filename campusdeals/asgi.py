"""
ASGI config for campusdeals project.

HTTP is served by Django; websocket connections are authenticated by
``WebSocketAuthMiddleware`` before reaching the chat consumer.
"""

import os
import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'campusdeals.settings')
django.setup()

from django.core.asgi import get_asgi_application
from channels.routing import ProtocolTypeRouter, URLRouter
from websocket_chat.routing import websocket_urlpatterns
from websocket_chat.middleware import WebSocketAuthMiddleware

django_asgi_app = get_asgi_application()

application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": WebSocketAuthMiddleware(
        URLRouter(
            websocket_urlpatterns
        )
    ),
})

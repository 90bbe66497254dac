"""
ASGI config for the watch-together backend.

It exposes the ASGI callable as a module-level variable named ``application``.
HTTP goes to Django, websockets go to the session consumer.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings.development")

django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402

import core.routing  # noqa: E402

application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": URLRouter(core.routing.websocket_urlpatterns),
})

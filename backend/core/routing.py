from django.urls import path
from sync.consumers import RoomSyncConsumer

websocket_urlpatterns = [
    path("ws/sync/", RoomSyncConsumer.as_asgi()),
    path("ws/v1/sync/", RoomSyncConsumer.as_asgi()),
]

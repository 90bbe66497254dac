from django.urls import path
from .views import (
    create_room_view,
    room_detail_view,
    video_history_view,
)

urlpatterns = [
    path("", create_room_view),
    path("<str:room_code>/", room_detail_view),
    path("<str:room_code>/history/", video_history_view),
]

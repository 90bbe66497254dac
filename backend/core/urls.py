from django.contrib import admin
from django.urls import include, path

from .views import health_view

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health/", health_view),
    path("api/rooms/", include("rooms.urls")),
]

from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .api_response import success


@api_view(["GET"])
def health_view(request):
    return Response(success({
        "status": "ok",
        "timestamp": timezone.now().isoformat(),
    }))

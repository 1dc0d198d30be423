from django.http import HttpResponse
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny


@api_view(["GET"])
@permission_classes([AllowAny])
def marketplace_prometheus_metrics(request):
    """
    Cart, promo and report metrics in the Prometheus text format.

    ``?name=`` may be repeated to restrict the output to those sample names.
    """
    names = request.query_params.getlist("name")
    registry = REGISTRY.restricted_registry(names) if names else REGISTRY
    return HttpResponse(generate_latest(registry), content_type=CONTENT_TYPE_LATEST)

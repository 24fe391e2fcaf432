from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'disputes'

router = SimpleRouter()
router.register(r'', views.DisputeViewSet, basename='dispute')

urlpatterns = [
    # GET    /api/disputes/                   - List disputes
    # POST   /api/disputes/                   - Open dispute (manufacturer)
    # GET    /api/disputes/{id}/              - Dispute with history
    # POST   /api/disputes/{id}/investigate/  - OPEN -> UNDER_INVESTIGATION
    # POST   /api/disputes/{id}/resolve/      - -> RESOLVED
    # POST   /api/disputes/{id}/refund/       - -> REFUNDED
    # POST   /api/disputes/{id}/reject/       - -> REJECTED
    path('', include(router.urls)),
]

from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    path('disputes/', views.dispute_stats, name='dispute-stats'),
    path('verifications/', views.verification_stats, name='verification-stats'),
    path('hotspots/', views.hotspots, name='hotspots'),
    path('trend/', views.verification_trend, name='verification-trend'),
]

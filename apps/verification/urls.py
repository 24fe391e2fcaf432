from django.urls import path
from . import views

app_name = 'verification'

urlpatterns = [
    # POST /api/verify/          - Verify a typed code (anonymous allowed)
    # POST /api/verify/qr/       - Verify a scanned QR payload (anonymous allowed)
    # GET  /api/verify/history/  - Current user's verification attempts
    path('', views.ManualVerificationView.as_view(), name='verify'),
    path('qr/', views.QRVerificationView.as_view(), name='verify-qr'),
    path('history/', views.VerificationHistoryView.as_view(), name='history'),
]

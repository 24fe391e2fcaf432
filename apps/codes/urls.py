from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'codes'

router = DefaultRouter()
router.register(r'products', views.ProductViewSet, basename='product')
router.register(r'batches', views.BatchViewSet, basename='batch')

urlpatterns = [
    # GET    /api/codes/products/                  - List own products
    # POST   /api/codes/products/                  - Register product
    # POST   /api/codes/products/{id}/withdraw/    - Withdraw product

    # GET    /api/codes/batches/                   - List own batches
    # POST   /api/codes/batches/                   - Register batch + issue codes
    # GET    /api/codes/batches/{id}/codes/        - List codes
    # POST   /api/codes/batches/{id}/issue/        - Issue more codes
    # POST   /api/codes/batches/{id}/recall/       - Recall batch
    # POST   /api/codes/batches/{id}/close_recall/ - Close active recall
    # GET    /api/codes/batches/{id}/summary/      - Used/unused counts
    path('', include(router.urls)),
]

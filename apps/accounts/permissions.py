"""
Role-based permission classes shared by the API apps.

Services take actors as plain users or identifiers; who may call which
endpoint is decided here, at the view layer.
"""
from rest_framework.permissions import BasePermission


class IsManufacturer(BasePermission):
    """
    Permission: only manufacturer accounts.

    Usage:
        class BatchViewSet(viewsets.ModelViewSet):
            permission_classes = [IsAuthenticated, IsManufacturer]
    """

    message = 'Only manufacturer accounts can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_manufacturer)


class IsBackOffice(BasePermission):
    """
    Permission: only back-office staff (admin role or Django staff).

    Usage:
        def get_permissions(self):
            if self.action in ['investigate', 'refund']:
                return [IsAuthenticated(), IsBackOffice()]
    """

    message = 'Only back-office staff can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_back_office)

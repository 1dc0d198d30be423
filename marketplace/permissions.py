from rest_framework import permissions

from utils.rbac import is_admin, is_seller


class IsMarketplaceAdmin(permissions.BasePermission):
    """
    Admin reports, moderation queues and exports.
    """

    message = "Administrator access required."

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsSeller(permissions.BasePermission):
    """
    Seller-scoped reports. Admins pass as well.
    """

    message = "Seller access required."

    def has_permission(self, request, view):
        return is_seller(request.user)

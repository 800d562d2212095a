from rest_framework import permissions

SALES_GROUP = 'sales'


def is_sales_user(user):
    """Staff and members of the sales group may record negotiation events"""
    if not (user and user.is_authenticated):
        return False
    return user.is_staff or user.groups.filter(name=SALES_GROUP).exists()


class IsSalesUserOrReadOnly(permissions.BasePermission):
    """Any authenticated user may read; writes need a sales user"""
    message = "Only sales staff can record negotiation events"

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_sales_user(request.user)

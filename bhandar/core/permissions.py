"""Role based permission classes"""
from rest_framework.permissions import BasePermission

from .models import User


def has_role(user, *roles):
    """True when the user holds one of the roles. Superusers hold every role."""
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    return getattr(user, 'role', None) in roles


def is_cluster_head(user):
    return has_role(user, User.ROLE_CLUSTER_HEAD)


def is_manager(user):
    return has_role(user, User.ROLE_MANAGER)


def is_manager_or_cluster_head(user):
    return has_role(user, User.ROLE_MANAGER, User.ROLE_CLUSTER_HEAD)


class IsClusterHead(BasePermission):
    message = 'Only cluster heads can perform this action'

    def has_permission(self, request, view):
        return is_cluster_head(request.user)


class IsManagerOrClusterHead(BasePermission):
    message = 'Only managers or cluster heads can perform this action'

    def has_permission(self, request, view):
        return is_manager_or_cluster_head(request.user)


class IsStaffOrClusterHead(BasePermission):
    message = 'Only administrators or cluster heads can perform this action'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_staff or is_cluster_head(user)))

# Canonical role names, stored as auth group names
ROLE_SELLER = "seller"
ROLE_ADMIN = "admin"


def _in_group(user, name: str) -> bool:
    return user.groups.filter(name=name).exists()


def is_admin(user) -> bool:
    """Marketplace administrators: superusers, staff, or members of the admin group."""
    if not getattr(user, "is_authenticated", False):
        return False
    return bool(user.is_superuser or user.is_staff or _in_group(user, ROLE_ADMIN))


def is_seller(user) -> bool:
    """Sellers are members of the seller group. Admins are considered sellers as well."""
    if not getattr(user, "is_authenticated", False):
        return False
    return _in_group(user, ROLE_SELLER) or is_admin(user)

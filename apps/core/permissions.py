"""
Role-Based Privileges for Scriptorium.

Maps AuthorProfile.role to named editor privileges.

Roles:
- publisher: everything
- managing_editor: publish and edit any article
- copy_editor: publish and edit any article
- staff_writer: publish, edit own articles
- freelancer: edit own unpublished articles
- designer: edit own unpublished articles

Usage:
    from apps.core.permissions import has_privs, PrivilegeRequiredMixin

    if has_privs(request.user, 'article.publish'):
        ...

    class MyView(PrivilegeRequiredMixin, View):
        required_privilege = 'article'
"""

import logging

from django.contrib.auth.mixins import LoginRequiredMixin

from .exceptions import AuthorizationError

logger = logging.getLogger(__name__)


PRIVILEGES = {
    'article.publish': ('publisher', 'managing_editor', 'copy_editor', 'staff_writer'),
    'article.edit': ('publisher', 'managing_editor', 'copy_editor'),
    'article.edit.published': ('publisher', 'managing_editor', 'copy_editor'),
    'article.edit.own': (
        'publisher', 'managing_editor', 'copy_editor',
        'staff_writer', 'freelancer', 'designer',
    ),
    'article.edit.own.published': ('publisher', 'managing_editor', 'copy_editor', 'staff_writer'),
    'article': (
        'publisher', 'managing_editor', 'copy_editor',
        'staff_writer', 'freelancer', 'designer',
    ),
}


def get_user_role(user):
    """
    Helper function to get user's role.

    Returns None for anonymous users and users without a profile.
    """
    if not user or not user.is_authenticated:
        return None

    if user.is_superuser:
        return 'publisher'

    from apps.core.models import AuthorProfile
    try:
        return user.author_profile.role
    except AuthorProfile.DoesNotExist:
        return None


def has_privs(user, privilege):
    """Check whether user's role grants the named privilege."""
    role = get_user_role(user)
    if role is None:
        return False
    if user.is_superuser:
        return True
    return role in PRIVILEGES.get(privilege, ())


class PrivilegeRequiredMixin(LoginRequiredMixin):
    """
    Deny the whole view unless the user holds required_privilege.
    """
    required_privilege = 'article'

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated and not has_privs(request.user, self.required_privilege):
            logger.warning(
                "Privilege %s denied for user %s",
                self.required_privilege,
                request.user.pk,
            )
            raise AuthorizationError(
                f"Privilege '{self.required_privilege}' required",
                field='privilege',
            )
        return super().dispatch(request, *args, **kwargs)

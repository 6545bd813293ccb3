"""
Post-sign-in redirect decisions
"""
from typing import Optional

from homequote.database.models import PartnerProfile

HOME = "/"


def is_safe_relative_path(path: Optional[str]) -> bool:
    """Same-origin path: starts with a single slash and carries no scheme or backslash"""
    if not path or not path.startswith("/"):
        return False
    return not path.startswith("//") and "\\" not in path


def landing_path(profile: Optional[PartnerProfile]) -> str:
    """Area for the signed-in user's role and moderation status"""
    if profile is None:
        return HOME
    if profile.role == "admin":
        return "/admin"
    if profile.role == "partner":
        if profile.status == "pending":
            return "/partner/pending"
        if profile.status == "suspended":
            return "/partner/suspended"
        return "/partner"
    return HOME


def post_sign_in_path(profile: Optional[PartnerProfile], redirect_to: Optional[str] = None) -> str:
    """
    An explicit redirect wins over the role-based landing page, but only a
    same-origin relative path; anything else falls back to the landing page.
    """
    if is_safe_relative_path(redirect_to):
        return redirect_to
    return landing_path(profile)

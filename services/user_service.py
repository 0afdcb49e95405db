# services/user_service.py
import logging
from typing import Optional, Tuple

from data_integrator import (
    get_admin_client,
    insert_user_profile,
    update_user_profile,
    delete_user_profile,
)
from domain.models import UserProfile

logger = logging.getLogger(__name__)

ROLES = {
    "super_admin": "Super Admin",
    "admin": "Admin",
    "accueil": "Accueil",
    "vendeur": "Vendeur",
    "comptable": "Comptable",
}

MANAGER_ROLES = ("super_admin", "admin")

# a suspended account is banned for 100 years
BAN_DURATION = "876000h"
UNBAN = "none"


def role_label(role: Optional[str]) -> str:
    return ROLES.get(role or "", "Utilisateur")


def can_manage_users(role: Optional[str]) -> bool:
    return role in MANAGER_ROLES


def can_delete_user(actor_role: Optional[str], target_role: Optional[str]) -> bool:
    """Managers can suspend or delete anyone but a super admin."""
    return can_manage_users(actor_role) and target_role != "super_admin"


def create_user(
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str = "admin",
) -> Tuple[bool, str, Optional[UserProfile]]:
    """
    Create a confirmed auth user with the admin API, then its profile row.
    The caller's own session is untouched.
    """
    if role not in ROLES:
        return False, f"Rôle inconnu: {role}", None

    admin = get_admin_client()
    try:
        resp = admin.auth.admin.create_user(
            {
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"first_name": first_name, "last_name": last_name},
            }
        )
    except Exception as e:
        logger.error("Error creating user: %s", e)
        return False, str(e), None

    if resp.user is None:
        return False, "No user data returned", None

    ok, msg, profile = insert_user_profile(
        {
            "id": resp.user.id,
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "phone": "",
            "role": role,
        },
        client=admin,
    )
    if not ok:
        logger.error("Error creating profile of %s: %s", email, msg)
        return False, msg, None

    logger.info("User %s created with role %s", email, role)
    return True, "Utilisateur créé avec succès !", profile


def delete_user(user_id: str) -> Tuple[bool, str]:
    """Remove the auth user, then its profile row."""
    admin = get_admin_client()
    try:
        admin.auth.admin.delete_user(user_id)
    except Exception as e:
        logger.error("Error deleting from auth: %s", e)
        return False, str(e)

    ok, msg, _ = delete_user_profile(user_id, client=admin)
    if not ok:
        logger.error("Error deleting from database: %s", msg)
        return False, msg

    return True, "Utilisateur supprimé avec succès"


def suspend_user(user_id: str, suspend: bool) -> Tuple[bool, str]:
    """
    Ban or un-ban the auth user. The `suspended` flag on the profile is only
    informative: failing to write it does not fail the call.
    """
    admin = get_admin_client()
    try:
        admin.auth.admin.update_user_by_id(
            user_id,
            {"ban_duration": BAN_DURATION if suspend else UNBAN},
        )
    except Exception as e:
        logger.error("Error updating auth status: %s", e)
        return False, str(e)

    ok, msg, _ = update_user_profile(user_id, {"suspended": suspend}, client=admin)
    if not ok:
        logger.error("Error updating database: %s", msg)

    return True, f"Utilisateur {'suspendu' if suspend else 'réactivé'} avec succès"

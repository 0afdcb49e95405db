# services/auth_service.py
import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional, Tuple

from data_integrator import create_session_client, fetch_user_profile, insert_user_profile
from domain.errors import StoreError
from domain.models import UserProfile

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "vendeur"


class ProfileBootstrap:
    """
    Fetch-or-create of the zop-users row after sign-in, de-duplicated per user.

    The first caller for a user id does the work; callers arriving while it
    runs wait on the same Future. The entry is removed as soon as the work
    ends, whether it succeeded or not.
    """

    def __init__(
            self,
            fetch: Callable[[str], Optional[UserProfile]] = fetch_user_profile,
            create: Callable[[Dict[str, Any]], Tuple[bool, str, Optional[UserProfile]]] = insert_user_profile,
    ):
        self._fetch = fetch
        self._create = create
        self._lock = threading.Lock()
        self._in_flight: Dict[str, Future] = {}

    def in_flight(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def get_or_create(
            self,
            user_id: str,
            email: str,
            metadata: Optional[Dict[str, Any]] = None,
    ) -> UserProfile:
        with self._lock:
            future = self._in_flight.get(user_id)
            owner = future is None
            if owner:
                future = Future()
                self._in_flight[user_id] = future

        if not owner:
            logger.debug("Profile of %s already loading, waiting", user_id)
            return future.result()

        try:
            profile = self._load_or_create(user_id, email, metadata or {})
        except Exception as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(profile)
            return profile
        finally:
            with self._lock:
                self._in_flight.pop(user_id, None)

    def _load_or_create(self, user_id: str, email: str, metadata: Dict[str, Any]) -> UserProfile:
        profile = self._fetch(user_id)
        if profile:
            logger.info("Profile loaded successfully: %s", profile.email)
            return profile

        logger.warning("No profile found for user %s, creating one", email)
        ok, msg, created = self._create(
            {
                "id": user_id,
                "email": email,
                "first_name": metadata.get("first_name", ""),
                "last_name": metadata.get("last_name", ""),
                "phone": metadata.get("phone"),
                "role": DEFAULT_ROLE,
            }
        )
        if not ok or created is None:
            raise StoreError(f"Create profile {user_id}", msg)
        return created


profile_bootstrap = ProfileBootstrap()


def _user_fields(user: Any) -> Tuple[str, str, Dict[str, Any]]:
    return user.id, user.email or "", dict(getattr(user, "user_metadata", None) or {})


def get_or_create_profile(user: Any) -> UserProfile:
    user_id, email, metadata = _user_fields(user)
    return profile_bootstrap.get_or_create(user_id, email, metadata)


def login(email: str, password: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Sign in with email and password on a client of its own.
    Returns (ok, message, {"client": ..., "user": ..., "session": ..., "profile": UserProfile})
    The caller keeps "client" for the rest of the browser session.
    """
    try:
        client = create_session_client()
        resp = client.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        logger.error("Login error: %s", e)
        return False, "Email ou mot de passe incorrect", None

    if resp.user is None:
        return False, "Email ou mot de passe incorrect", None

    try:
        profile = get_or_create_profile(resp.user)
    except StoreError as e:
        logger.error("Failed to load profile: %s", e)
        logout(client)
        return False, "Impossible de charger le profil", None

    if profile.suspended:
        logout(client)
        return False, "Ce compte est suspendu", None

    return True, "Connecté", {"client": client, "user": resp.user, "session": resp.session, "profile": profile}


def logout(client: Any) -> Tuple[bool, str]:
    if client is None:
        return True, "Déconnecté"
    try:
        client.auth.sign_out()
    except Exception as e:
        logger.error("Logout error: %s", e)
        return False, str(e)
    return True, "Déconnecté"


def get_session(client: Any):
    """Current session of a client returned by login, or None."""
    if client is None:
        return None
    try:
        return client.auth.get_session()
    except Exception as e:
        logger.error("Get session error: %s", e)
        return None


def register(
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str = "",
) -> Tuple[bool, str, Optional[UserProfile]]:
    """
    Self sign-up: create the auth user, then its zop-users row.
    Self-registered accounts always get the default role.
    Returns (ok, message, profile)
    """
    try:
        resp = create_session_client().auth.sign_up(
            {
                "email": email,
                "password": password,
                "options": {"data": {"first_name": first_name, "last_name": last_name, "phone": phone}},
            }
        )
    except Exception as e:
        logger.error("Registration error: %s", e)
        return False, str(e), None

    if resp.user is None:
        return False, "No user data returned", None

    ok, msg, profile = insert_user_profile(
        {
            "id": resp.user.id,
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone or None,
            "role": DEFAULT_ROLE,
        }
    )
    if not ok:
        logger.error("Profile creation failed: %s", msg)
        return False, "Failed to create user profile", None

    return True, "Compte créé", profile

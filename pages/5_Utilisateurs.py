import logging
import re

import streamlit as st
import pandas as pd

from data_integrator import fetch_users
from domain.errors import StoreError
from element_component import confirmation_dialog, show_outcome, require_login
from services.user_service import (
    ROLES,
    role_label,
    can_manage_users,
    can_delete_user,
    create_user,
    delete_user,
    suspend_user,
)

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Utilisateurs", page_icon="👥")
st.sidebar.header("👥 Utilisateurs")

profile = require_login()

if not can_manage_users(profile.role):
    st.error("Accès réservé aux administrateurs")
    st.stop()

show_outcome("user_state")


def validate_new_user(email, password, first_name):
    if not email or not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email):
        return False, "Email invalide"
    if len(password) < 6:
        return False, "Le mot de passe doit contenir au moins 6 caractères"
    if not first_name:
        return False, "Le prénom est obligatoire"
    return True, ""


try:
    users = fetch_users()
except StoreError as e:
    logger.error("Error fetching users: %s", e)
    st.error("Erreur lors du chargement des utilisateurs")
    st.stop()

st.subheader("Utilisateurs")

st.dataframe(
    pd.DataFrame(
        [
            {
                "Nom": u.full_name,
                "Email": u.email,
                "Rôle": role_label(u.role),
                "Statut": "Suspendu" if u.suspended else "Actif",
                "Créé le": u.created_at.strftime("%d/%m/%Y") if u.created_at else "-",
            }
            for u in users
        ]
    ),
    hide_index=True,
    width="stretch",
)

# -------------------------------------------------------------------
# Suspend / delete
# -------------------------------------------------------------------

manageable = {f"{u.full_name} <{u.email}>": u for u in users if can_delete_user(profile.role, u.role) and u.id != profile.id}
if manageable:
    selected = st.selectbox("Utilisateur", manageable.keys(), index=None, placeholder="Choisir un utilisateur")
    if selected is not None:
        target = manageable[selected]
        col_suspend, col_delete = st.columns(2)
        with col_suspend:
            label = "Réactiver" if target.suspended else "Suspendre"
            if st.button(label):
                confirmation_dialog(
                    {"Utilisateur": target.email, "Action": label},
                    lambda: suspend_user(target.id, not target.suspended),
                    "user_state",
                    key="suspend_user",
                )
        with col_delete:
            if st.button("Supprimer", type="primary"):
                confirmation_dialog(
                    {"Utilisateur": target.email, "Action": "Suppression définitive"},
                    lambda: delete_user(target.id),
                    "user_state",
                    key="delete_user",
                )

st.divider()

# -------------------------------------------------------------------
# New user
# -------------------------------------------------------------------

with st.form("user_input_form", enter_to_submit=False):
    st.subheader("Nouvel utilisateur")
    first_name = st.text_input("Prénom")
    last_name = st.text_input("Nom")
    email = st.text_input("Email")
    password = st.text_input("Mot de passe", type="password")
    role = st.selectbox("Rôle", ROLES.keys(), index=list(ROLES).index("admin"), format_func=role_label)

    if st.form_submit_button("Créer"):
        is_valid, message = validate_new_user(email.strip(), password, first_name.strip())
        if not is_valid:
            st.error(message)
        else:
            ok, msg, _ = create_user(email.strip(), password, first_name.strip(), last_name.strip(), role)
            st.session_state["user_state"] = (ok, msg)
            st.rerun()

import re

import streamlit as st

from services.auth_service import login, logout, register
from services.user_service import role_label
from utils.logging_setup import configure_logging

configure_logging()

st.set_page_config(
    page_title="Zo POS",
    page_icon="🛍️"
)

st.sidebar.header("🛍️ Zo POS")

if "profile" not in st.session_state:
    st.session_state["profile"] = None
    st.session_state["auth_client"] = None

profile = st.session_state["profile"]


def validate_registration(email, password, confirm, first_name):
    if not email or not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email):
        return False, "Email invalide"
    if len(password) < 6:
        return False, "Le mot de passe doit contenir au moins 6 caractères"
    if password != confirm:
        return False, "Les mots de passe ne correspondent pas"
    if not first_name:
        return False, "Le prénom est obligatoire"
    return True, ""


if profile is None:
    tab_login, tab_register = st.tabs(["Connexion", "Créer un compte"])

    with tab_login:
        with st.form("login_form", enter_to_submit=True):
            st.subheader("Connexion")
            email = st.text_input("Email")
            password = st.text_input("Mot de passe", type="password")

            if st.form_submit_button("Se connecter"):
                if not email or not password:
                    st.error("Email et mot de passe requis")
                else:
                    ok, msg, data = login(email.strip(), password)
                    if ok:
                        st.session_state["profile"] = data["profile"]
                        st.session_state["auth_client"] = data["client"]
                        st.rerun()
                    else:
                        st.error(msg)

    with tab_register:
        with st.form("register_form", enter_to_submit=False):
            st.subheader("Créer un compte")
            first_name = st.text_input("Prénom")
            last_name = st.text_input("Nom")
            phone = st.text_input("Téléphone")
            new_email = st.text_input("Email", key="register_email")
            new_password = st.text_input("Mot de passe", type="password", key="register_password")
            confirm = st.text_input("Confirmer le mot de passe", type="password")

            if st.form_submit_button("Créer un compte"):
                is_valid, message = validate_registration(new_email.strip(), new_password, confirm, first_name.strip())
                if not is_valid:
                    st.error(message)
                else:
                    ok, msg, _ = register(
                        new_email.strip(), new_password, first_name.strip(), last_name.strip(), phone.strip()
                    )
                    if ok:
                        st.success(f"{msg}. Vous pouvez maintenant vous connecter.")
                    else:
                        st.error(msg)
    st.stop()

st.title(f"Bienvenue, {profile.first_name} ! 👋")
st.caption(f"{profile.email} • {role_label(profile.role)}")
st.write("Gérez votre boutique de mode premium depuis votre tableau de bord.")

st.page_link("pages/1_Caisse.py", label="Caisse", icon="🧾")
st.page_link("pages/2_Produits.py", label="Produits", icon="👗")
st.page_link("pages/3_Ventes.py", label="Ventes", icon="📒")
st.page_link("pages/4_Analyses.py", label="Analyses", icon="📈")
st.page_link("pages/5_Utilisateurs.py", label="Utilisateurs", icon="👥")

if st.sidebar.button("Déconnexion"):
    logout(st.session_state.get("auth_client"))
    st.session_state.clear()
    st.rerun()

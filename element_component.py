import streamlit as st
import pandas as pd

from services.auth_service import get_session


@st.dialog("Confirmation")
def confirmation_dialog(summary, action, state_name, key="confirm"):
    """
    Show `summary` (dict) and run `action()` on "Oui".
    `action` returns (ok, message); the outcome lands in st.session_state[state_name].
    """
    if summary:
        df = pd.DataFrame(list(summary.items()), columns=["Champ", "Valeur"])
        df["Valeur"] = df["Valeur"].astype("string")
        st.dataframe(df, hide_index=True)

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Oui", type="primary", key=f"{key}_yes"):
            ok, msg = action()
            st.session_state[state_name] = (ok, msg)

            if not ok:
                st.error(msg)
            else:
                st.rerun()
    with col_no:
        if st.button("Non", key=f"{key}_no"):
            st.rerun()


def show_outcome(state_name):
    """Display and clear the (ok, message) left by confirmation_dialog."""
    outcome = st.session_state.pop(state_name, None)
    if not outcome:
        return
    ok, msg = outcome
    if ok:
        st.success(msg)
    else:
        st.error(msg)


def require_login():
    """
    Stop the page when nobody is signed in, or when the browser session's
    auth client no longer holds a session. Returns the session profile.
    """
    profile = st.session_state.get("profile")
    if profile is not None and get_session(st.session_state.get("auth_client")) is None:
        st.session_state.clear()
        profile = None
    if profile is None:
        st.warning("Veuillez vous connecter depuis la page d'accueil.")
        st.stop()
    return profile

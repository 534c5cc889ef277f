import streamlit as st

from ignition.core.exceptions.base import AppException
from ignition.services.workspace_service import WorkspaceService
from ignition.services.workspace_session import WorkspaceSession
from ignition.utils.async_helpers import run_async


def _open_workspace(service: WorkspaceService, session: WorkspaceSession, workspace_id: int) -> None:
    run_async(session.open(workspace_id))
    run_async(service.set_selected_workspace(workspace_id))


def render():
    st.title("Workspaces")

    service: WorkspaceService = st.session_state["workspace_service"]
    session: WorkspaceSession = st.session_state["workspace_session"]

    # ─── Create ───────────────────────────────────────────────────
    with st.form("create_workspace", clear_on_submit=True):
        name = st.text_input("New workspace", placeholder="Workspace name")
        if st.form_submit_button("Create Workspace", type="primary"):
            workspace = run_async(service.create_workspace(name))
            if workspace is None:
                st.warning("Workspace name cannot be empty.")
            else:
                _open_workspace(service, session, workspace.id)
                st.rerun()

    workspaces = run_async(service.list_workspaces())
    if not workspaces:
        st.info("No workspaces yet. Create one to get started.")
        return

    # ─── List ─────────────────────────────────────────────────────
    for workspace in workspaces:
        is_open = session.workspace_id == str(workspace.id)
        with st.container(border=True):
            cols = st.columns([4, 1, 1])
            cols[0].markdown(f"### {workspace.name}" + ("  ·  _open_" if is_open else ""))

            if cols[1].button("Open", key=f"open_ws_{workspace.id}", disabled=is_open):
                _open_workspace(service, session, workspace.id)
                st.rerun()

            confirm_key = f"confirm_delete_ws_{workspace.id}"
            if cols[2].button("Delete", key=f"delete_ws_{workspace.id}"):
                st.session_state[confirm_key] = True

            new_name = st.text_input("Rename", value=workspace.name, key=f"rename_ws_{workspace.id}")
            if new_name != workspace.name:
                try:
                    if not run_async(service.rename_workspace(workspace.id, new_name)):
                        st.warning("Workspace name cannot be empty.")
                    else:
                        st.rerun()
                except AppException as e:
                    st.error(e.message)

            if st.session_state.get(confirm_key):
                boards, cards = run_async(service.workspace_deletion_impact(workspace.id))
                if boards or cards:
                    st.warning(
                        f"Deleting **{workspace.name}** also deletes {boards} board(s) and {cards} card(s)."
                    )
                c1, c2 = st.columns(2)
                if c1.button("Confirm delete", key=f"confirm_ws_{workspace.id}", type="primary"):
                    run_async(service.delete_workspace(workspace.id, session=session))
                    st.session_state.pop(confirm_key, None)
                    st.rerun()
                if c2.button("Cancel", key=f"cancel_ws_{workspace.id}"):
                    st.session_state.pop(confirm_key, None)
                    st.rerun()

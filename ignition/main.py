import streamlit as st
from loguru import logger

from ignition.core.config import get_settings
from ignition.core.exceptions.domain import StoreError
from ignition.core.logger import sanitize_dict, setup_logger
from ignition.services.persistence import PersistenceSync
from ignition.services.store import get_store
from ignition.services.workspace_service import WorkspaceService
from ignition.services.workspace_session import WorkspaceSession
from ignition.utils.async_helpers import run_async


def _init_state() -> None:
    """Create the per-browser session objects once and reopen the last workspace."""
    if "workspace_session" in st.session_state:
        return

    store = get_store()
    service = WorkspaceService(store)
    session = WorkspaceSession(PersistenceSync(store))

    selected = run_async(service.get_selected_workspace())
    if selected is not None:
        run_async(session.open(selected))
        logger.info(f"Restored workspace {selected}")

    st.session_state["workspace_service"] = service
    st.session_state["workspace_session"] = session


def main():
    settings = get_settings()
    setup_logger(debug=settings.debug, log_dir=settings.log_dir)
    logger.debug(f"Settings: {sanitize_dict(settings.model_dump())}")

    st.set_page_config(
        page_title=settings.app_name,
        page_icon="🔥",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    try:
        _init_state()
    except StoreError as e:
        st.error(f"Storage unavailable: {e.message}")
        st.stop()

    from ignition.pages import board, workspaces

    pages = {
        "Ignition": [
            st.Page(board.render, title="Boards", icon="🗂️", default=True, url_path="boards"),
            st.Page(workspaces.render, title="Workspaces", icon="📁", url_path="workspaces"),
        ]
    }

    nav = st.navigation(pages)

    session: WorkspaceSession = st.session_state["workspace_session"]
    with st.sidebar:
        st.markdown(f"**{settings.app_name.upper()}**")
        if session.workspace_id is not None:
            st.caption(f"Workspace #{session.workspace_id}")

    try:
        nav.run()
    except StoreError as e:
        st.error(f"Storage unavailable: {e.message}")


if __name__ == "__main__":
    main()

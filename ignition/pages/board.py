from datetime import date, datetime, time, timezone

import streamlit as st

from ignition.core.constants import MAX_CUSTOM_STATUSES, CardStatus
from ignition.core.exceptions.base import AppException
from ignition.schemas.card import Card
from ignition.services.card_tree import CardTree
from ignition.services.workspace_session import WorkspaceSession
from ignition.utils.async_helpers import run_async

STATUS_ICONS = {
    CardStatus.TODO: "⚪",
    CardStatus.DOING: "🔵",
    CardStatus.DONE: "🟢",
    CardStatus.BLOCKED: "🔴",
    CardStatus.NONE: "",
}


def resolve_due_date(current: datetime | None, picked: date | None) -> datetime | None:
    """Map the date picker back onto a due timestamp, keeping the stored time when the day is unchanged."""
    if picked is None:
        return None
    if current is not None and current.date() == picked:
        return current
    return datetime.combine(picked, time.min, tzinfo=timezone.utc)


def _confirm(key: str, message: str) -> bool:
    """Two-step confirmation: returns True once the user confirms."""
    st.warning(message)
    c1, c2 = st.columns(2)
    if c1.button("Confirm", key=f"{key}_yes", type="primary"):
        st.session_state.pop(key, None)
        return True
    if c2.button("Cancel", key=f"{key}_no"):
        st.session_state.pop(key, None)
        st.rerun()
    return False


def _drop_from_picker(key: str, start_drag, drop) -> None:
    """Selectbox stand-in for a drag gesture: pick up, drop on the chosen target, reset the picker."""
    target = st.session_state.get(key)
    st.session_state[key] = None
    if target is not None:
        start_drag()
        run_async(drop(target))


def _render_card_editor(session: WorkspaceSession, card: Card) -> None:
    with st.form(f"edit_card_{card.id}"):
        title = st.text_input("Title", value=card.title)
        details = st.text_area("Details", value=card.details, height=80)
        status = st.selectbox(
            "Status",
            options=list(CardStatus),
            index=list(CardStatus).index(card.status),
            format_func=lambda s: s.value,
        )
        due = st.date_input("Due date", value=card.due_date.date() if card.due_date else None)
        custom = st.text_input(
            f"Custom statuses (comma separated, max {MAX_CUSTOM_STATUSES})",
            value=", ".join(card.custom_statuses),
        )
        if st.form_submit_button("Save"):
            labels = [s.strip() for s in custom.split(",") if s.strip()]
            due_date = resolve_due_date(card.due_date, due)
            try:
                ok = run_async(
                    session.update_card(
                        card.id,
                        title=title,
                        details=details,
                        status=status,
                        due_date=due_date,
                        custom_statuses=labels,
                    )
                )
                if not ok and not title.strip():
                    st.warning("Card title cannot be empty.")
                else:
                    st.rerun()
            except AppException as e:
                st.error(e.message)


def _render_card_actions(session: WorkspaceSession, card: Card, tree: CardTree) -> None:
    others = [c for c in session.cards if c.id != card.id and not tree.would_create_cycle(card.id, c.id)]
    targets = {c.id: c.title for c in others}

    nest_key = f"nest_{card.id}"
    st.selectbox(
        "Nest under",
        options=[None, *targets],
        format_func=lambda cid: "—" if cid is None else targets[cid],
        key=nest_key,
        on_change=_drop_from_picker,
        args=(nest_key, lambda: session.start_card_drag(card.id), session.drop_on_card),
    )

    boards = {b.id: b.title for b in session.boards}
    move_key = f"move_{card.id}"
    st.selectbox(
        "Move to board",
        options=[None, *boards],
        format_func=lambda bid: "—" if bid is None else boards[bid],
        key=move_key,
        on_change=_drop_from_picker,
        args=(move_key, lambda: session.start_card_drag(card.id), session.drop_on_board),
    )

    confirm_key = f"confirm_delete_card_{card.id}"
    if st.button("Delete card", key=f"delete_card_{card.id}"):
        if session.card_deletion_impact(card.id) == 0:
            run_async(session.delete_card(card.id))
            st.rerun()
        st.session_state[confirm_key] = True
    if st.session_state.get(confirm_key):
        count = session.card_deletion_impact(card.id)
        if _confirm(confirm_key, f"This also deletes {count} sub-card(s)."):
            run_async(session.delete_card(card.id))
            st.rerun()


def _render_card(session: WorkspaceSession, card: Card, tree: CardTree, depth: int) -> None:
    icon = STATUS_ICONS.get(card.status, "")
    labels = " ".join(f"`{s}`" for s in card.custom_statuses)
    header = f"{'↳ ' * depth}{icon} {card.title} {labels}".strip()

    with st.expander(header, expanded=not card.is_minimized):
        if card.due_date:
            st.caption(f"Due {card.due_date:%Y-%m-%d}")
        if card.details:
            st.markdown(card.details)
        if st.toggle("Edit", key=f"editing_{card.id}"):
            _render_card_editor(session, card)
        _render_card_actions(session, card, tree)

    for child_id in tree.children_of(card.id):
        child = session.working_set.get_card(child_id)
        if child is not None and child.board_id == card.board_id:
            _render_card(session, child, tree, depth + 1)


def render():
    session: WorkspaceSession = st.session_state["workspace_session"]

    if session.workspace_id is None:
        st.title("Boards")
        st.info("Open a workspace on the Workspaces page first.")
        return

    st.title("Boards")

    with st.form("create_board", clear_on_submit=True):
        cols = st.columns([4, 1])
        title = cols[0].text_input("New board", placeholder="Board title", label_visibility="collapsed")
        if cols[1].form_submit_button("Add Board", type="primary"):
            if run_async(session.create_board(title)) is None:
                st.warning("Board title cannot be empty.")
            else:
                st.rerun()

    if not session.boards:
        st.info("No boards yet.")
        return

    tree = session.card_tree()
    columns = st.columns(len(session.boards))

    for column, board in zip(columns, list(session.boards)):
        with column:
            st.subheader(board.title)
            if board.description:
                st.caption(board.description)

            others = {b.id: b.title for b in session.boards if b.id != board.id}
            reorder_key = f"reorder_{board.id}"
            st.selectbox(
                "Move to slot of",
                options=[None, *others],
                format_func=lambda bid: "—" if bid is None else others[bid],
                key=reorder_key,
                on_change=_drop_from_picker,
                args=(reorder_key, lambda board_id=board.id: session.start_board_drag(board_id), session.drop_on_board),
            )

            for card_id in tree.roots_on_board(board.id):
                card = session.working_set.get_card(card_id)
                if card is not None:
                    _render_card(session, card, tree, depth=0)

            with st.form(f"create_card_{board.id}", clear_on_submit=True):
                card_title = st.text_input("Card title", key=f"card_title_{board.id}")
                card_details = st.text_area("Details (optional)", key=f"card_details_{board.id}", height=68)
                if st.form_submit_button("+ Add Card"):
                    created = run_async(session.create_card(board.id, card_title, details=card_details))
                    if created is None:
                        st.warning("Card title cannot be empty.")
                    else:
                        st.rerun()

            confirm_key = f"confirm_delete_board_{board.id}"
            if st.button("Delete board", key=f"delete_board_{board.id}"):
                st.session_state[confirm_key] = True
            if st.session_state.get(confirm_key):
                count = session.board_deletion_impact(board.id)
                message = f"Delete **{board.title}**"
                message += f" and its {count} card(s)?" if count else "?"
                if _confirm(confirm_key, message):
                    run_async(session.delete_board(board.id))
                    st.rerun()

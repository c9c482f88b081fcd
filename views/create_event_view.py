from datetime import datetime

import pandas as pd
import streamlit as st

from use_cases.authoring_workflow import AuthoringWorkflow
from use_cases.draft_models import CATEGORIES, DATE_FORMAT, DraftEvent, parse_time
from utils import session_manager

IMAGE_TYPES = ["png", "jpg", "jpeg", "gif", "webp"]


def _key(workflow: AuthoringWorkflow, name: str) -> str:
    # Scoped per workflow so a fresh draft never inherits stale widget state.
    return f"wf{id(workflow)}_{name}"


def _render_basic_info(workflow: AuthoringWorkflow, draft: DraftEvent):
    draft.set_field("title", st.text_input("Event title *", value=draft.title, key=_key(workflow, "title")))
    draft.set_field("description", st.text_area("Description *", value=draft.description, height=120,
                                                 key=_key(workflow, "description")))
    options = [""] + list(CATEGORIES)
    current = draft.category if draft.category in CATEGORIES else ""
    draft.set_field("category", st.selectbox(
        "Category *", options, index=options.index(current),
        format_func=lambda c: c.capitalize() if c else "Choose…",
        key=_key(workflow, "category"),
    ))


def _render_location_and_date(workflow: AuthoringWorkflow, draft: DraftEvent):
    col_date, col_time = st.columns(2)
    with col_date:
        current_date = datetime.strptime(draft.date, DATE_FORMAT).date() if draft.date else None
        picked_date = st.date_input("Event date *", value=current_date, key=_key(workflow, "date"))
        if picked_date is not None:
            draft.set_field("date", picked_date)
    with col_time:
        current_time = parse_time(draft.time) if draft.time else None
        picked = st.time_input("Event time *", value=current_time, key=_key(workflow, "time"))
        if picked is not None:
            draft.set_field("time", picked)

    draft.set_field("location.address", st.text_input("Street address *", value=draft.location.address,
                                                      key=_key(workflow, "address")))
    col_city, col_state, col_country = st.columns(3)
    with col_city:
        draft.set_field("location.city", st.text_input("City *", value=draft.location.city,
                                                       key=_key(workflow, "city")))
    with col_state:
        draft.set_field("location.state", st.text_input("State *", value=draft.location.state,
                                                        key=_key(workflow, "state")))
    with col_country:
        draft.set_field("location.country", st.text_input("Country *", value=draft.location.country,
                                                          key=_key(workflow, "country")))


def _render_tickets(workflow: AuthoringWorkflow, draft: DraftEvent):
    st.subheader("Ticket tiers")
    for index, tier in enumerate(list(draft.ticket_tiers)):
        tier_key = f"tier{id(tier)}"
        with st.container(border=True):
            col_name, col_price = st.columns(2)
            with col_name:
                draft.update_tier(index, "name", st.text_input(
                    "Tier name *", value=tier.name, key=_key(workflow, f"{tier_key}_name")))
            with col_price:
                draft.update_tier(index, "price", st.text_input(
                    "Price ($) *", value=str(tier.price), key=_key(workflow, f"{tier_key}_price")))
            col_qty, col_desc = st.columns(2)
            with col_qty:
                draft.update_tier(index, "quantity", st.text_input(
                    "Quantity available *", value=str(tier.quantity), key=_key(workflow, f"{tier_key}_qty")))
            with col_desc:
                draft.update_tier(index, "description", st.text_input(
                    "Description", value=tier.description, key=_key(workflow, f"{tier_key}_desc")))
            if len(draft.ticket_tiers) > 1 and st.button("Remove tier", key=_key(workflow, f"{tier_key}_rm")):
                draft.remove_tier(index)
                st.rerun()

    if st.button("➕ Add tier", key=_key(workflow, "add_tier")):
        draft.add_tier()
        st.rerun()


def _render_media(workflow: AuthoringWorkflow, draft: DraftEvent):
    st.subheader("Event images")
    uploads = st.file_uploader("Drop images here", type=IMAGE_TYPES, accept_multiple_files=True,
                               key=_key(workflow, f"uploader{len(draft.pending_media)}"))
    if uploads and st.button("Add selected images", key=_key(workflow, "add_media")):
        draft.add_media(uploads)
        st.rerun()

    cols = st.columns(3)
    for index, media in enumerate(list(draft.pending_media)):
        with cols[index % 3]:
            st.image(media.content, caption=media.filename, use_container_width=True)
            if st.button("Remove", key=_key(workflow, f"rm_{media.local_handle}")):
                draft.remove_media(index)
                st.rerun()


def _render_review(draft: DraftEvent):
    st.subheader("Review event details")
    st.markdown(f"**{draft.title}** · {draft.category}")
    st.write(draft.description)
    st.markdown(
        f"📅 {draft.date} {draft.time}  \n"
        f"📍 {draft.location.address}, {draft.location.city}, {draft.location.state}, {draft.location.country}"
    )
    tiers = pd.DataFrame(
        [{"Tier": t.name, "Price ($)": t.price, "Quantity": t.quantity, "Description": t.description}
         for t in draft.ticket_tiers]
    )
    st.dataframe(tiers, hide_index=True, use_container_width=True)
    if draft.pending_media:
        st.caption(f"{len(draft.pending_media)} image(s) will be uploaded on submit")


def render_create_event(workflow: AuthoringWorkflow):
    st.header("Create new event")
    state = workflow.state
    draft = workflow.draft

    st.progress((state.active_step_index + 1) / state.step_count,
                text=f"Step {state.active_step_index + 1} of {state.step_count}: {workflow.active_step.label}")

    if state.last_error is not None:
        st.error(str(state.last_error))
        for field_name, message in state.field_errors.items():
            st.caption(f"• {field_name}: {message}")

    step_key = workflow.active_step.key
    if step_key == "basic-info":
        _render_basic_info(workflow, draft)
    elif step_key == "location-and-date":
        _render_location_and_date(workflow, draft)
    elif step_key == "tickets-and-pricing":
        _render_tickets(workflow, draft)
    elif step_key == "media":
        _render_media(workflow, draft)
    else:
        _render_review(draft)

    col_back, col_next = st.columns(2)
    with col_back:
        if st.button("Back", disabled=state.active_step_index == 0, key=_key(workflow, "back")):
            workflow.go_back()
            st.rerun()
    with col_next:
        if state.is_terminal:
            if st.button("Create event", type="primary", key=_key(workflow, "submit")):
                with st.spinner("Uploading images and creating event…"):
                    result = workflow.submit()
                if result.status == "CREATED":
                    st.session_state.last_created_event_id = result.event_id
                    session_manager.discard_authoring_workflow()
                st.rerun()
        elif st.button("Next", type="primary", key=_key(workflow, "next")):
            workflow.go_next()
            st.rerun()

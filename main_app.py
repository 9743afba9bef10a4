import asyncio
import logging

import streamlit as st

from common.layout import render_frame
from common.logging_config import configure_logging
from common.overlay import OutsideDismissOverlay, PointerEventBus, region_with_prefix
from config import NavSettings
from menu_tree import trail_to_route
from nav_state import NavigationController
from registry_service import RemoteModuleRegistry
from security import RolePermissions
from ui_nav import ACCOUNT_PREFIX, build_sidebar

DEFAULT_LOCATION = "/overview"

logger = logging.getLogger(__name__)

# -------------------------------------------
# PAGE CONFIG
# -------------------------------------------
st.set_page_config(
    page_title="Octopus",
    page_icon="📦",
    layout="wide",
    initial_sidebar_state="expanded"
)

settings = NavSettings.from_env()
configure_logging(settings.log_level, settings.log_format)


# 1. Session objects (one controller per browser session) ------
def _init_session():
    role = st.session_state.get("role") or settings.default_role
    st.session_state["role"] = role
    st.session_state.setdefault("user", "local user")

    pointer_events = PointerEventBus()
    controller = NavigationController(
        permissions=RolePermissions(role),
        registry=RemoteModuleRegistry(settings),
        location=st.query_params.get("page", DEFAULT_LOCATION),
    )
    st.session_state["pointer_events"] = pointer_events
    st.session_state["account_menu"] = OutsideDismissOverlay(
        pointer_events, owns=region_with_prefix(ACCOUNT_PREFIX)
    )
    st.session_state["nav_controller"] = controller

    # Registry pages: one attempt per session, failures only get logged
    asyncio.run(controller.load_remote_pages())
    logger.info("Navigation ready for role %s", role)


if "nav_controller" not in st.session_state:
    _init_session()

controller = st.session_state["nav_controller"]
role = st.session_state["role"]
user = st.session_state["user"]

# 2. Location comes from the URL ----------------------
location = st.query_params.get("page", DEFAULT_LOCATION)
if location != controller.location:
    controller.navigate(location)

# 3. Draw sidebar + get nav state ---------------------
nav_state = build_sidebar(
    user=user,
    role=role,
    controller=controller,
    pointer_events=st.session_state["pointer_events"],
    account_menu=st.session_state["account_menu"],
)

if nav_state["logout"]:
    # wipe session & rerun
    controller.unmount()
    st.session_state["account_menu"].dispose()
    st.session_state.clear()
    st.query_params.clear()
    st.rerun()

if nav_state["location"] != location:
    st.query_params["page"] = nav_state["location"]
    st.rerun()

if nav_state["changed"]:
    st.rerun()

# 4. Frame for the current page -----------------------
snapshot = controller.snapshot()
trail = trail_to_route(snapshot.tree, snapshot.location)
title = "Settings" if nav_state["settings"] else (trail[-1].label if trail else "Page not found")

render_frame(
    title=title,
    breadcrumb=[entry.label for entry in trail],
    sidebar_width=snapshot.sidebar_width,
    location=snapshot.location,
    owner=role,
)

if not trail:
    st.info(f"No page in your menu routes to `{snapshot.location}`.")

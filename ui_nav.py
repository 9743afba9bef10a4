# ui_nav.py

import streamlit as st

from common.overlay import OutsideDismissOverlay, PointerEventBus
from menu_tree import render_icon
from nav_state import NavigationController, SidebarMode

ACCOUNT_PREFIX = "account::"


def _button(label, key, pointer_events: PointerEventBus, **kwargs):
    """
    st.button that also reports the press to the pointer bus, so open
    overlays can tell whether the press landed inside or outside them.
    """
    clicked = st.button(label, key=key, use_container_width=True, **kwargs)
    if clicked:
        pointer_events.dispatch(key)
    return clicked


def _entry_label(entry, active_id, show_label=True):
    icon = render_icon(entry.icon)
    if not show_label:
        return icon
    marker = "✅ " if entry.id == active_id else ""
    return f"{marker}{icon} {entry.label}"


def _draw_rail(controller, pointer_events, show_labels):
    """Top-level entries. Returns True if something was clicked."""
    active_id = controller.active.active_top_level_id
    open_module = controller.open_module
    open_id = open_module.id if open_module else None
    for entry in controller.tree:
        is_current = entry.id in (active_id, open_id)
        clicked = _button(
            _entry_label(entry, active_id, show_label=show_labels),
            key=f"nav::{entry.id}",
            pointer_events=pointer_events,
            help=None if show_labels else entry.label,
            type="primary" if is_current else "secondary",
        )
        if clicked:
            controller.select_entry(entry.id)
            return True
    return False


def _draw_panel(controller, pointer_events):
    """Secondary panel for the open module. Returns True if something was clicked."""
    module = controller.open_module
    if module is None:
        return False

    if _button("← Back", key="panel::back", pointer_events=pointer_events):
        controller.back()
        return True

    st.markdown(f"**{render_icon(module.icon)} {module.label}**")
    for sub in module.children or ():
        if sub.is_branch:
            arrow = "▾" if controller.is_expanded(sub.id) else "▸"
            if _button(f"{arrow} {render_icon(sub.icon)} {sub.label}", key=f"panel::{sub.id}",
                       pointer_events=pointer_events):
                controller.select_entry(sub.id)
                return True
            if controller.is_expanded(sub.id):
                for nested in sub.children or ():
                    if _draw_leaf(controller, pointer_events, nested, indent="    "):
                        return True
        elif _draw_leaf(controller, pointer_events, sub):
            return True
    return False


def _draw_leaf(controller, pointer_events, entry, indent=""):
    is_current = entry.route is not None and entry.route == controller.location
    label = f"{indent}{'✅' if is_current else '•'} {render_icon(entry.icon)} {entry.label}"
    if _button(label, key=f"panel::{entry.id}", pointer_events=pointer_events,
               disabled=entry.is_inert):
        controller.select_entry(entry.id)
        return True
    return False


def build_sidebar(user, role, controller: NavigationController,
                  pointer_events: PointerEventBus, account_menu: OutsideDismissOverlay):
    """
    Draw the sidebar from the controller state and apply any click to it.

    Returns a dict:
      {
        "location": ...,      (route after this run's clicks)
        "changed": True/False (something was clicked -> caller reruns)
        "settings": True/False,
        "logout": True/False
      }
    """
    mode = controller.mode
    changed = False
    settings_clicked = False
    logout_clicked = False

    with st.sidebar:
        # --- 1. Header: brand + collapse toggle ---
        if mode == SidebarMode.EXPANDED:
            st.markdown("### 📦 Octopus")
        toggle_label = "⏩" if mode != SidebarMode.EXPANDED else "⏪ Collapse"
        if _button(toggle_label, key="nav::toggle", pointer_events=pointer_events,
                   disabled=mode == SidebarMode.ICON_RAIL_WITH_PANEL):
            changed = controller.toggle_sidebar()

        # --- 2. Navigation ---
        if not changed:
            if mode == SidebarMode.ICON_RAIL_WITH_PANEL:
                rail_col, panel_col = st.columns([1, 3])
                with rail_col:
                    changed = _draw_rail(controller, pointer_events, show_labels=False)
                if not changed:
                    with panel_col:
                        changed = _draw_panel(controller, pointer_events)
            else:
                changed = _draw_rail(controller, pointer_events,
                                     show_labels=mode == SidebarMode.EXPANDED)

        # --- 3. Account menu (closes on any press outside it) ---
        st.markdown("---")
        account_label = f"👤 {user}" if mode == SidebarMode.EXPANDED else "👤"
        if _button(account_label, key=f"{ACCOUNT_PREFIX}toggle", pointer_events=pointer_events):
            account_menu.toggle()
            changed = True

        if account_menu.is_open:
            st.caption(f"Role: `{role}`")
            if _button("⚙️ Settings", key=f"{ACCOUNT_PREFIX}settings", pointer_events=pointer_events):
                settings_clicked = True
                account_menu.close()
            if _button("🔐 Sign Out", key=f"{ACCOUNT_PREFIX}signout", pointer_events=pointer_events):
                logout_clicked = True
                account_menu.close()
                changed = True

    # --- 4. Return the state (all plain values) ---
    return {
        "location": controller.location,
        "changed": changed,
        "settings": settings_clicked,
        "logout": logout_clicked,
    }

"""
common/layout.py

Shared layout helpers for the Octopus shell.

The host page never decides how wide the sidebar is: it asks the
`SidebarLayout` (`get_sidebar_width()`) and reserves exactly that much room.
All CSS is embedded in st.markdown() calls, no external style.css needed.
"""

from typing import List, Optional
import streamlit as st


def sidebar_width_css(width_px: int) -> str:
    """CSS that pins the Streamlit sidebar to the width the layout asks for."""
    return f"""
<style>
    section[data-testid="stSidebar"] {{
        width: {width_px}px !important;
        min-width: {width_px}px !important;
        max-width: {width_px}px !important;
        transition: width 0.3s ease;
    }}
    section[data-testid="stSidebar"] button {{
        justify-content: flex-start;
    }}
</style>
"""


def render_frame(
    title: str,
    breadcrumb: List[str],
    sidebar_width: int,
    location: str,
    owner: Optional[str] = None,
) -> None:
    """
    Render the thin header strip for the current page and size the sidebar.
    """

    # --- 1. Reserve the sidebar space ---
    st.markdown(sidebar_width_css(sidebar_width), unsafe_allow_html=True)

    # --- 2. Header CSS (embedded) ---
    header_css = """
<style>
    div.block-container {
        padding-top: 1.8rem !important;
    }
    .octo-header {
        display: flex;
        justify-content: space-between;
        align-items: center;
        padding: 0.3rem 1.25rem;
        background-image: linear-gradient(90deg, #0F7EA3, #4B9FFF);
        border-radius: 10px;
        box-shadow: 0 4px 12px rgba(0, 0, 0, 0.1);
        margin-bottom: 1.5rem;
        color: white;
    }
    .octo-header h2 {
        font-size: 1.1rem;
        font-weight: 500;
        margin: 0;
        padding: 0;
        line-height: 1;
        color: white;
    }
    .route-badge {
        font-family: 'Consolas', 'Menlo', 'monospace';
        background-color: rgba(255, 255, 255, 0.15);
        padding: 0.2rem 0.5rem;
        border-radius: 4px;
        font-size: 0.7rem;
        font-weight: 700;
    }
    .crumbs {
        font-size: 0.8rem;
        color: #eee;
    }
</style>
"""

    # --- 3. Header HTML ---
    crumbs = " › ".join(breadcrumb) if breadcrumb else "Octopus"
    owner_html = f'<span class="crumbs"><strong>Owner:</strong> {owner}</span>' if owner else ""
    header_html = f"""
<div class="octo-header">
<h2>Octopus · {title}</h2>
<span class="crumbs">{crumbs}</span>
{owner_html}
<span class="route-badge">{location}</span>
</div>
"""

    st.markdown(header_css, unsafe_allow_html=True)
    st.markdown(header_html, unsafe_allow_html=True)

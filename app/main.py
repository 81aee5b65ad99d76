"""
Streamlit Frontend for IffiDB

The admin panel the operator works in: login, dashboard, records,
command console and settings.

DESIGN PRINCIPLES:
1. Views only render; every change goes through the services
2. Errors from direct actions are shown right where they happened
3. The console panel shows the audit log, exactly as the services wrote it
4. Views refresh when the change notifier says the records changed
"""

import asyncio
import html
from datetime import date
from typing import Optional

import streamlit as st

from iffidb.models.audit import LogAction
from iffidb.models.record import Record, RecordCreate, RecordUpdate
from iffidb.orchestrator import AppComponents, create_app_components
from iffidb.services import (
    AuthError,
    PendingDownload,
    RecordService,
    RecordServiceError,
    filter_records,
)


# Page configuration
st.set_page_config(
    page_title="IffiDB Admin",
    page_icon="🗂️",
    layout="wide",
    initial_sidebar_state="expanded",
)

LOG_COLORS = {
    LogAction.ERROR: "#f87171",
    LogAction.CREATE: "#4ade80",
    LogAction.DELETE: "#fb923c",
    LogAction.UPDATE: "#60a5fa",
    LogAction.LOGIN: "#c084fc",
    LogAction.SYSTEM: "#22d3ee",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class RecordsView:
    """
    Cached record list that re-reads after any change.

    Subscribes to the change notifier, so edits made from the console
    show up on the records page and the dashboard.
    """

    def __init__(self, records: RecordService):
        self._service = records
        self._cached: Optional[list[Record]] = None
        self._unsubscribe = records.notifier.subscribe(self.invalidate)

    def invalidate(self) -> None:
        self._cached = None

    def get(self) -> list[Record]:
        if self._cached is None:
            self._cached = run_async(self._service.list())
        return self._cached

    def close(self) -> None:
        self._unsubscribe()


@st.cache_resource
def get_components() -> tuple[AppComponents, PendingDownload, RecordsView]:
    """Get or create application components (cached)."""
    # Exports are held per browser session, not per process.
    downloads = PendingDownload(state=lambda: st.session_state)
    components = create_app_components(downloader=downloads)
    return components, downloads, RecordsView(components.records)


def main():
    """Main application entry point."""
    components, downloads, view = get_components()

    user = components.auth.current_user()
    if user is None:
        render_login_page(components)
        return

    st.sidebar.title("🗂️ IffiDB Admin")
    st.sidebar.markdown(f"Signed in as **{user.name}** ({user.role.value})")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "📇 Records", "💻 Console", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Log out"):
        components.auth.logout()
        st.rerun()

    if page == "📊 Dashboard":
        render_dashboard_page(components)
    elif page == "📇 Records":
        render_records_page(components, downloads, view)
    elif page == "💻 Console":
        render_console_page(components, downloads)
    elif page == "⚙️ Settings":
        render_settings_page(components)


def render_login_page(components: AppComponents):
    """Render the sign-in form."""
    st.title("🔒 Welcome Back")
    st.markdown("Sign in to the IffiDB Admin Panel")

    with st.form("login"):
        email = st.text_input("Email", value=components.settings.auth.admin_email)
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        with st.spinner("Signing in..."):
            try:
                run_async(components.auth.login(email, password))
                st.rerun()
            except AuthError as e:
                st.error(str(e))


def render_dashboard_page(components: AppComponents):
    """Render the dashboard figures."""
    st.title("📊 Dashboard")

    stats = run_async(components.records.stats())

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Records", stats.total_records)
    col2.metric("New Today", stats.new_today)
    col3.metric("Deleted (simulated)", stats.deleted_count)

    st.subheader("Recently Added")
    if not stats.last_added:
        st.info("No records yet. Generate sample data from Settings.")
        return
    st.dataframe(
        [
            {
                "Name": r.name,
                "Email": r.email,
                "Created": r.created_at.strftime("%d %b %Y %H:%M"),
            }
            for r in stats.last_added
        ],
        use_container_width=True,
    )


def render_records_page(
    components: AppComponents,
    downloads: PendingDownload,
    view: RecordsView,
):
    """Render the record table with search, filters, forms and export."""
    st.title("📇 Records")
    records_service = components.records

    col1, col2, col3 = st.columns([2, 1, 1])
    with col1:
        search = st.text_input("Search by name or email")
    with col2:
        start_date: Optional[date] = st.date_input("From", value=None)
    with col3:
        end_date: Optional[date] = st.date_input("To", value=None)

    filtered = filter_records(view.get(), search, start_date, end_date)

    if st.button("⬇️ Export CSV"):
        try:
            records_service.export_csv(
                filtered,
                prefix=components.settings.console.records_export_prefix,
            )
        except RecordServiceError as e:
            st.warning(f"{e} (no records match the current filters)")
    pending = downloads.take()
    if pending:
        filename, content = pending
        st.download_button("Save file", data=content, file_name=filename, mime="text/csv")

    st.dataframe(
        [
            {
                "ID": r.id,
                "Name": r.name,
                "Email": r.email,
                "Phone": r.phone,
                "Address": r.address,
                "Created": r.created_at.strftime("%d %b %Y %H:%M"),
            }
            for r in filtered
        ],
        use_container_width=True,
    )
    st.caption(f"{len(filtered)} of {len(view.get())} records")

    st.markdown("---")
    tab_create, tab_edit = st.tabs(["➕ New record", "✏️ Edit / delete"])

    with tab_create:
        with st.form("create_record", clear_on_submit=True):
            name = st.text_input("Name *")
            email = st.text_input("Email *")
            phone = st.text_input("Phone")
            address = st.text_area("Address")
            if st.form_submit_button("Save", type="primary"):
                try:
                    run_async(records_service.create(
                        RecordCreate(name=name, email=email, phone=phone, address=address)
                    ))
                    st.success("Record created.")
                except RecordServiceError as e:
                    st.error(str(e))

    with tab_edit:
        if not filtered:
            st.info("No records to edit.")
            return
        selected = st.selectbox(
            "Record",
            options=filtered,
            format_func=lambda r: f"{r.name} ({r.email}) [{r.id}]",
        )
        with st.form("edit_record"):
            name = st.text_input("Name", value=selected.name)
            email = st.text_input("Email", value=selected.email)
            phone = st.text_input("Phone", value=selected.phone)
            address = st.text_area("Address", value=selected.address)
            save, delete = st.columns(2)
            saved = save.form_submit_button("Update", type="primary")
            deleted = delete.form_submit_button("Delete")

        try:
            if saved:
                run_async(records_service.update(
                    selected.id,
                    RecordUpdate(
                        name=name or None,
                        email=email or None,
                        phone=phone or None,
                        address=address or None,
                    ),
                ))
                st.rerun()
            if deleted:
                run_async(records_service.delete(selected.id))
                st.rerun()
        except RecordServiceError as e:
            st.error(str(e))


def render_console_page(components: AppComponents, downloads: PendingDownload):
    """Render the command console and its log panel."""
    st.title("💻 Command AI & Logs")
    console = components.console

    with st.form("console", clear_on_submit=True):
        line = st.text_input(
            "Command",
            placeholder="Type a command, e.g. help",
        )
        natural = st.checkbox(
            "Natural language",
            help='e.g. "create record name John email john@test.com"',
        )
        if st.form_submit_button("Run") and line:
            run_async(console.submit(line, interpret=natural))

    if not console.can_listen:
        st.caption("🎙️ Voice input is not available on this platform.")

    pending = downloads.take()
    if pending:
        filename, content = pending
        st.download_button("Save export", data=content, file_name=filename, mime="text/csv")

    entries = console.visible_entries()
    if not entries:
        st.markdown(
            "*System initialized. Waiting for commands... Type `help` to get started.*"
        )
        return

    lines = []
    for entry in entries:
        color = LOG_COLORS.get(entry.action, "#9ca3af")
        lines.append(
            f"<div style='font-family:monospace;font-size:0.85em'>"
            f"<span style='color:#6b7280'>[{entry.timestamp.strftime('%H:%M:%S')}]</span> "
            f"<b style='color:{color}'>{entry.action.value}</b> "
            f"{html.escape(entry.details)}</div>"
        )
    st.markdown("\n".join(lines), unsafe_allow_html=True)

    with st.expander("📋 Copy logs"):
        st.code(console.copy_logs(), language=None)


def render_settings_page(components: AppComponents):
    """Render settings and data tools."""
    st.title("⚙️ Settings")

    st.subheader("Sample data")
    sample_size = components.settings.console.sample_size
    st.markdown(f"Generate {sample_size} random records.")
    if st.button("🎲 Generate sample data"):
        with st.spinner("Generating..."):
            run_async(components.records.generate_sample(sample_size))
        st.success("Data generated successfully! Check the Records page.")

    st.subheader("Storage")
    store_settings = components.settings.store
    st.markdown(f"**Backend:** {store_settings.backend}")
    if store_settings.backend == "file":
        st.markdown(f"**Data file:** `{store_settings.path}`")
    st.markdown(f"**Audit log capacity:** {components.audit.capacity} entries")


if __name__ == "__main__":
    main()

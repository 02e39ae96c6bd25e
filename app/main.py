"""
Streamlit Frontend for Voice Budget

Type a command or upload a recording, hear the confirmation, and see
your latest income and expenses.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. Visual feedback for all operations

All parsing and execution happens in VoiceCommandFlow; this page only
collects input and displays the response.
"""

import asyncio

import streamlit as st

from voicebudget.config import get_settings, validate_all_settings
from voicebudget.models.records import EntityKind, TransactionKind
from voicebudget.orchestrator import VoiceCommandFlow, create_app_components
from voicebudget.services.storage import RecordStoreInterface


# Page configuration
st.set_page_config(
    page_title="Voice Budget",
    page_icon="🎙️",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def main():
    """Main application entry point."""
    flow, store = get_components()
    user_id = get_settings().app.default_user_id

    st.sidebar.title("🎙️ Voice Budget")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🎙️ Voice Command", "📊 Transactions", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **Try saying:**
        - "Spend $25 on transportation"
        - "Add $2000 from salary to my income"
        - "Show my budget"
        """
    )

    if page == "🎙️ Voice Command":
        render_command_page(flow, store, user_id)
    elif page == "📊 Transactions":
        render_transactions_page(store, user_id)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_command_page(flow: VoiceCommandFlow, store: RecordStoreInterface, user_id: str):
    """Render the command input page."""
    st.title("🎙️ Voice Command")

    text = st.text_input(
        "Type a command:",
        placeholder='e.g., Spend $25 on transportation',
    )
    recording = st.file_uploader(
        "...or upload a recording",
        type=["mp4", "m4a", "mp3", "wav", "webm"],
    )

    if not st.button("▶️ Run Command", type="primary"):
        return

    audio = None
    filename = "recording.mp4"
    if recording is not None:
        audio = recording.getvalue()
        filename = recording.name
        max_bytes = get_settings().app.max_audio_size_bytes
        if len(audio) > max_bytes:
            st.error(f"Recording is too large (limit {max_bytes // (1024 * 1024)} MB).")
            return

    if not text and audio is None:
        st.warning("Type a command or upload a recording first.")
        return

    # Refresh the transaction list only when this command succeeds
    def on_success(response):
        st.session_state.refresh_transactions = True

    unsubscribe = flow.notifier.subscribe(on_success)
    try:
        with st.spinner("Working on it..."):
            response = run_async(
                flow.process_voice_command(
                    text=text,
                    user_id=user_id,
                    audio=audio,
                    audio_filename=filename,
                )
            )
    finally:
        unsubscribe()

    if response.transcript and audio is not None:
        st.caption(f'Heard: "{response.transcript}"')

    st.markdown(response.message_html(), unsafe_allow_html=True)

    if response.audio:
        st.audio(response.audio, format="audio/mpeg")

    with st.expander("🔍 Command Details"):
        st.json(response.to_payload())

    if st.session_state.pop("refresh_transactions", False):
        render_recent_transactions(store, user_id, limit=5)


def render_recent_transactions(store: RecordStoreInterface, user_id: str, limit: int = 20):
    """Show the latest income and expense records side by side."""
    symbol = get_settings().app.currency_symbol

    def names(kind: EntityKind) -> dict[str, str]:
        entities = run_async(store.list_entities(kind, user_id))
        return {entity.id: entity.display_name for entity in entities}

    col1, col2 = st.columns(2)
    for column, kind, title in (
        (col1, TransactionKind.INCOME, "💵 Income"),
        (col2, TransactionKind.EXPENSE, "🧾 Expenses"),
    ):
        with column:
            st.markdown(f"### {title}")
            records = run_async(store.list_transactions(kind, user_id, limit=limit))
            if not records:
                st.info("Nothing recorded yet.")
                continue
            lookup = names(kind.entity_kind)
            st.table([
                {
                    "Date": record.entry_date.isoformat(),
                    "Name": lookup.get(record.entity_id, "Unknown"),
                    "Amount": f"{symbol}{record.amount:.2f}",
                }
                for record in records
            ])


def render_transactions_page(store: RecordStoreInterface, user_id: str):
    """Render the transactions list page."""
    st.title("📊 Your Transactions")
    try:
        render_recent_transactions(store, user_id)
    except Exception as e:
        st.error(f"Could not load transactions: {e}")


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("ElevenLabs (Speech)", "elevenlabs"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")

    app_settings = get_settings().app
    st.caption(
        f"Environment: {app_settings.app_environment}"
        f" | Debug mode: {'on' if app_settings.debug_mode else 'off'}"
    )

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your API keys. "
        "See `.env.example` for the available variables. Without Google Sheets "
        "your records are kept in memory; without ElevenLabs recordings are "
        "replaced by sample commands."
    )


if __name__ == "__main__":
    main()

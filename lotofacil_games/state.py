from __future__ import annotations

import streamlit as st

from .models import ImportSummary, SyncSummary

IMPORT_KEY = "last_import_summary"
SYNC_KEY = "last_sync_summary"


def init_state() -> None:
    st.session_state.setdefault(IMPORT_KEY, None)
    st.session_state.setdefault(SYNC_KEY, None)


def get_import_summary() -> ImportSummary | None:
    return st.session_state[IMPORT_KEY]


def set_import_summary(summary: ImportSummary) -> None:
    st.session_state[IMPORT_KEY] = summary


def get_sync_summary() -> SyncSummary | None:
    return st.session_state[SYNC_KEY]


def set_sync_summary(summary: SyncSummary) -> None:
    st.session_state[SYNC_KEY] = summary


def clear_summaries() -> None:
    st.session_state[IMPORT_KEY] = None
    st.session_state[SYNC_KEY] = None

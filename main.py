# main.py

"""Streamlit web UI for the log sanitizer.

Provides a simple interface to paste log text and receive a copy with
every IPv4 and IPv6 address removed or replaced.
"""

import streamlit as st
import logging
from logsanitizer.core.domain import Omit, Replace
from logsanitizer.service.pipeline import sanitize_text

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

OMIT_LABEL = "Omit lines containing an address"
REPLACE_LABEL = "Replace addresses with a token"


def main():
    """Run the Streamlit application UI.

    Accepts log text and a policy choice, invokes the sanitize pipeline,
    and displays the sanitized output with a count of detected addresses.
    """
    st.set_page_config(layout="wide", page_title="Log Sanitizer", page_icon="🧹")

    st.title("Log Sanitizer")
    st.markdown(
        "Strip IPv4 and IPv6 addresses from server logs before sharing them."
    )
    st.markdown("---")

    mode = st.radio("Policy", [OMIT_LABEL, REPLACE_LABEL], horizontal=True)
    token = ""
    if mode == REPLACE_LABEL:
        token = st.text_input("Replacement token", value="<redacted>")

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Input Log")
        text_input = st.text_area(
            "Source Log",
            height=400,
            placeholder="Paste log lines here...",
        )

    with col2:
        st.subheader("Sanitized Output")

        if st.button("Sanitize", type="primary"):
            if not text_input:
                st.warning("Please enter text to process.")
                logger.warning("Sanitize attempted with empty input")

            else:
                policy = Replace(token) if mode == REPLACE_LABEL else Omit()
                result = sanitize_text(text_input, policy)

                if "error" in result.metadata:
                    st.error(f"Sanitizing failed: {result.metadata['error']}")
                else:
                    st.text_area(
                        "Sanitized Log", value=result.sanitized_text, height=400
                    )
                    st.success(
                        f"Done. Found {len(result.entities)} addresses, "
                        f"dropped {result.metadata['lines_dropped']} lines."
                    )

    with st.sidebar:
        st.header("About")
        st.markdown("""
        Detected address forms:

        - **IPv4** dotted quads (`192.168.1.100`)
        - **IPv6** full and compressed forms (`2001:db8::8a2e:370:7334`)
        - **IPv4-mapped IPv6** (`::ffff:192.168.0.1`)
        - **Link-local with zone** (`fe80::1%eth0`)
        """)


if __name__ == "__main__":
    main()

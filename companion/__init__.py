"""Conversational companion core — session state, generation and proactive messages."""

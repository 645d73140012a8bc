"""
SkySentinel Alert Dispatch Service.

Accepts posts from monitored air-raid alert channels, runs them through
the detector engine (with an optional LLM second opinion) and
broadcasts forwarded alerts to Telegram chats and webhooks.
"""

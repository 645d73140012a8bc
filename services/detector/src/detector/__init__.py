"""
SkySentinel Detector.

Classifies posts from air-raid alert channels into threat kinds,
resolves their relevance to the configured location, infers missing
details from recent per-source context, deduplicates repeats across
sources and renders the alert text.
"""

"""Attendance Engine package.

Turns raw time-clock punches (terminal exports, web submissions, manual
corrections) into per-day and per-month work-hour summaries. Organized by
feature modules (punches, sessions, policies, summaries, ...) with a thin
Flask controller layer over service/repository layers.
"""

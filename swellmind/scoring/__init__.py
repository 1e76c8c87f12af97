"""Forecast-window scoring.

Modules
-------
heuristic  - rule-based generic score from stated preferences
blended    - learned score blended with the heuristic by session count
router     - score_window() phase routing and rank_windows()
"""

"""Insights derived from a user's rated sessions.

Modules
-------
aggregator  - calculate_user_insights(): ideal conditions from good sessions
report      - build_insights_report(): insights plus distribution, trend, advice
"""

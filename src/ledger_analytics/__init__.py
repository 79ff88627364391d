"""Analytics engine for income and expense tracking.

Turns stored expense and income records into filtered views, grouped
summaries, growth metrics and ranked leaderboards.
"""

__version__ = "0.1.0"

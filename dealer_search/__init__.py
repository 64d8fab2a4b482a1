"""
Dealer Search
Vehicle search and shopping assistant for dealership inventory feeds.
Built with FastAPI, Claude, and live dealer inventory data.
"""

__version__ = "1.0.0"

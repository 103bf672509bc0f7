"""
ai-pm: keeps local mirrors of GitHub issues and Slack channels and asks an
LLM which conversations still need a ticket.
"""

__version__ = "0.1.0"

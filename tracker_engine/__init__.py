"""
TRACKER Engine

Command rule engine for a small software-project tracker:
- Role-based command authorization
- Ticket lifecycle with single-step undo
- Milestones with blocking dependencies
- Due-date driven priority escalation
- Once-only milestone notifications
- Analytic reports
"""

__version__ = "0.1.0"

"""
Request Workflow Module

Generic request-approval workflow:
- Rule book (per-kind states, transitions and authorized roles, loaded from YAML)
- Role authorization gate (pure rule table lookups)
- Request stores (in-memory and PostgreSQL, compare-and-swap transitions)
- Transition engine (create / transition / queries)
- Best-effort audit notifications (log, in-memory feed, webhook, PostgreSQL)
"""

__version__ = "1.0.0"

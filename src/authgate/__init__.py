"""AuthGate — request authentication and audit trail for HTTP services.

Issues and verifies bearer session tokens, gates protected routes on a
verified principal, and records who did what to which resource after
every successful state-changing request.
"""

__version__ = "0.1.0"

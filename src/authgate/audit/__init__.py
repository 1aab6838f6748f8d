"""Audit trail: who did what to which resource.

Learn: Routes are labelled with @audited(action, resource_type). The
AuditedRoute route class observes each labelled route's response and,
for 2xx statuses, hands an entry to the AuditRecorder, which writes it
in a detached task. The client never waits on, or sees, the write.
"""

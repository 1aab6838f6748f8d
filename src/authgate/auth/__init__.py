"""Authentication: session tokens and the request gate.

Learn: Two pieces compose into the request pipeline:
1. TokenAuthority → issues and verifies signed session tokens (stateless)
2. require_principal → FastAPI dependency that rejects requests without
   a valid token and attaches the verified Principal to request.state

Invalid and expired tokens look identical to the client (403).
"""

"""acp-identity: pluggable identity-provider backends for access control.

Backends authenticate users against an external OpenID Connect provider,
resolve their group memberships for policy decisions, and revoke tokens
on logout.
"""

__version__ = "0.1.0"

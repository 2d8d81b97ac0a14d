# Request identity

from .identity import IdentityDependency, issue_token, optional_identity, require_identity, verify_token

__all__ = ["IdentityDependency", "issue_token", "optional_identity", "require_identity", "verify_token"]

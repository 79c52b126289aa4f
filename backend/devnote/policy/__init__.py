"""
DevNote Backend - Visibility Policy Package
===========================================

What:  Pure decision functions that govern who may see a user's posts and
       profile lists (followers, following, likes, favorites).
How:   Callers pass immutable snapshots (Viewer, ProfileSnapshot); the policy
       returns booleans, tag sets, or an AccessResult. It performs no I/O and
       never raises for a denial.
"""

from devnote.policy.visibility import (
    AccessDecision,
    AccessResult,
    PostVisibility,
    ProfileSnapshot,
    ResourceKind,
    Viewer,
    VisibilityPolicy,
    visibility_policy,
)

__all__ = [
    "AccessDecision",
    "AccessResult",
    "PostVisibility",
    "ProfileSnapshot",
    "ResourceKind",
    "Viewer",
    "VisibilityPolicy",
    "visibility_policy",
]

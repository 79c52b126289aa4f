"""
DevNote Backend - Visibility and Privacy Policy
===============================================

What:  Decides whether a viewer may see a profile sub-resource (followers,
       following, liked posts, favorited posts) and which post visibility
       tags a viewer is entitled to when listing a profile's posts.
Who:   Called by the services before any list query runs.

Rules:
    Self (authenticated viewer whose id equals the profile's id) sees
    everything, whatever the profile flags say.

    Everyone else, anonymous or authenticated, is treated identically:
    - a sub-resource is visible iff its `show_*` flag is set
    - posts tagged PUBLIC and FOLLOWERS are listed, PRIVATE never is

    FOLLOWERS-tagged posts are not gated on an actual follow edge. Any viewer
    who can list a profile's posts sees them. This is the existing product
    behavior and is kept as-is until it is clarified.

Inputs are snapshots taken by the caller for the current request. A flag
toggled concurrently may or may not be observed by an in-flight request.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Optional


class PostVisibility(str, Enum):
    """Per-post visibility tag. Every post carries exactly one."""

    PUBLIC = "PUBLIC"          # Anyone
    FOLLOWERS = "FOLLOWERS"    # Intended for followers (see module note)
    PRIVATE = "PRIVATE"        # Author only


DEFAULT_POST_VISIBILITY = PostVisibility.PUBLIC

ALL_POST_VISIBILITIES: FrozenSet[PostVisibility] = frozenset(PostVisibility)
NON_OWNER_POST_VISIBILITIES: FrozenSet[PostVisibility] = frozenset(
    {PostVisibility.PUBLIC, PostVisibility.FOLLOWERS}
)


class ResourceKind(str, Enum):
    """A gated profile list."""

    FOLLOWERS = "followers"
    FOLLOWING = "following"
    LIKES = "likes"
    FAVORITES = "favorites"

    @property
    def flag_name(self) -> str:
        """Name of the ProfileSnapshot attribute that gates this list."""
        return _FLAG_NAMES[self]

    @property
    def denial_reason(self) -> str:
        return _DENIAL_REASONS[self]


_FLAG_NAMES = {
    ResourceKind.FOLLOWERS: "show_followers",
    ResourceKind.FOLLOWING: "show_following",
    ResourceKind.LIKES: "show_likes",
    ResourceKind.FAVORITES: "show_favorites",
}

_DENIAL_REASONS = {
    ResourceKind.FOLLOWERS: "followers list is private",
    ResourceKind.FOLLOWING: "following list is private",
    ResourceKind.LIKES: "liked list is private",
    ResourceKind.FAVORITES: "favorites list is private",
}


@dataclass(frozen=True)
class Viewer:
    """
    The requester. `user_id is None` means anonymous.

    Built once per request by the identity dependency and passed explicitly
    into every service and policy call.
    """

    user_id: Optional[int] = None

    @classmethod
    def anonymous(cls) -> "Viewer":
        return cls(user_id=None)

    @classmethod
    def authenticated(cls, user_id: int) -> "Viewer":
        return cls(user_id=user_id)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


@dataclass(frozen=True)
class ProfileSnapshot:
    """Immutable view of the target user's id and privacy flags."""

    user_id: int
    show_followers: bool = True
    show_following: bool = True
    show_likes: bool = True
    show_favorites: bool = True

    @classmethod
    def of(cls, user: Any) -> "ProfileSnapshot":
        """Snapshot any object exposing `id` and the four `show_*` attributes."""
        return cls(
            user_id=user.id,
            show_followers=bool(user.show_followers),
            show_following=bool(user.show_following),
            show_likes=bool(user.show_likes),
            show_favorites=bool(user.show_favorites),
        )


class AccessDecision(str, Enum):
    ALLOWED = "allowed"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class AccessResult:
    """Outcome of a sub-resource access check. `reason` is set for FORBIDDEN."""

    decision: AccessDecision
    reason: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.decision is AccessDecision.ALLOWED


class VisibilityPolicy:
    """
    Stateless evaluator for the rules in the module docstring.

    Every method is a pure function of its arguments; one shared instance
    (`visibility_policy`) is used across concurrent requests.
    """

    def is_self(self, viewer: Viewer, profile: ProfileSnapshot) -> bool:
        """True iff the viewer is authenticated and owns the profile."""
        return viewer.is_authenticated and viewer.user_id == profile.user_id

    def can_view_sub_resource(
        self, viewer: Viewer, profile: ProfileSnapshot, kind: ResourceKind
    ) -> bool:
        if self.is_self(viewer, profile):
            return True
        return bool(getattr(profile, kind.flag_name))

    def visible_post_visibilities(
        self, viewer: Viewer, profile: ProfileSnapshot
    ) -> FrozenSet[PostVisibility]:
        """
        Tags the viewer may see when listing `profile`'s posts.

        Self gets all three, including PRIVATE drafts. Any other viewer gets
        PUBLIC and FOLLOWERS, regardless of whether they follow the author.
        """
        if self.is_self(viewer, profile):
            return ALL_POST_VISIBILITIES
        return NON_OWNER_POST_VISIBILITIES

    def can_view_post(
        self, viewer: Viewer, author_id: int, visibility: PostVisibility
    ) -> bool:
        """Single-post form of `visible_post_visibilities`."""
        if viewer.is_authenticated and viewer.user_id == author_id:
            return True
        return PostVisibility(visibility) in NON_OWNER_POST_VISIBILITIES

    def evaluate_sub_resource_access(
        self,
        viewer: Viewer,
        profile: Optional[ProfileSnapshot],
        kind: ResourceKind,
    ) -> AccessResult:
        """
        Access-denial contract for the profile list endpoints.

        A missing profile is NOT_FOUND before any flag or viewer state is
        consulted. Denial is a normal outcome and is returned, not raised.
        """
        if profile is None:
            return AccessResult(AccessDecision.NOT_FOUND)
        if not self.can_view_sub_resource(viewer, profile, kind):
            return AccessResult(AccessDecision.FORBIDDEN, reason=kind.denial_reason)
        return AccessResult(AccessDecision.ALLOWED)


visibility_policy = VisibilityPolicy()

# Services package init
"""
DevNote Backend - Services Layer
================================

What:  Business logic between routes (HTTP) and the database.
How:   Stateless singletons receiving the request's AsyncSession and the
       current Viewer. They raise DevNoteError subclasses and never build
       HTTP responses.

Service Inventory:
    - UserService:       registration, login, lookups, profile edits,
                         privacy flags, gated-list authorization
    - PostService:       post CRUD, profile post listing, liked/favorited lists
    - FollowService:     follow/unfollow, followers/following lists
    - EngagementService: likes and favorites
    - ProfileService:    profile page payload (counts, is_self, is_following)
    - FileService:       avatar validation, storage and cleanup

Import graph (no cycles):
    file_service ◀── user_service ◀── post_service ◀── engagement_service
                          ▲     ▲
                          │     └──── follow_service
                          └────────── profile_service (uses post + follow)
"""

# Services package init
"""
SocialHub Backend — Services Layer
====================================

What:  Business rules between the routes (HTTP) and the repositories (SQL).
How:   Services take the request's AsyncSession per call, validate input,
       run one or a few repository operations, and return response schemas.
       Services whose writes notify someone (posts, comments, follows,
       messages) are built per request with the application's
       NotificationDispatcher; the others are module-level singletons.

Service Inventory:
    - AuthService:             register, login, token refresh, own profile
    - UserService:             profiles, follow / unfollow, follower lists
    - FeedService:             home feed and per-account post grids
    - PostService:             create, detail, like / unlike, delete
    - CommentService:          comment, threaded listing, delete
    - StoryService:            24-hour stories, views, grouping by owner
    - MessageService:          direct messages and conversations
    - SearchService:           accounts, posts, hashtags, trending
    - NotificationService:     fan-out and the recipient's inbox
    - NotificationDispatcher:  best-effort delivery (retry + circuit breaker)
"""

# Routes package init
"""
SocialHub Backend — API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.
How:   One module per resource; every router carries its own /api prefix.

Route Inventory:
    - auth.py:           /api/auth           register, login, refresh, me, profile
    - users.py:          /api/users          profiles, follow graph
    - posts.py:          /api/posts          create, feed, detail, likes
    - comments.py:       /api/comments       threaded comments
    - stories.py:        /api/stories        24h stories and views
    - messages.py:       /api/messages       direct messages
    - search.py:         /api/search         accounts, posts, hashtags, trending
    - notifications.py:  /api/notifications  inbox and read state
    - health.py:         GET /health         service health check

Routes stay THIN: extract data from the request, call a service, wrap the
result in the success envelope. Business logic belongs in services.
"""

"""
Blog Backend — API Routes Package
===================================

Route Inventory (prefix settings.api_prefix, default /api):
    - blog_posts.py: /blogPosts, /blogPosts/{id}, /blogPosts/{id}/cover,
                     /blogPosts/{id}/comments[/{commentId}]
    - authors.py:    /authors, /authors/{id}, /authors/{id}/avatar,
                     /authors/{id}/blogPosts
    - auth.py:       /auth/register, /auth/login, /auth/logout, /auth/me
    - files.py:      /files/{path}
    - health.py:     /health (no prefix)

Routes stay thin: parse the request, call a service, return its model.
"""

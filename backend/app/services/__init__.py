"""
Blog Backend — Services Layer
===============================

Service Inventory:
    - PostService:   blog posts and their embedded comment threads
    - AuthorService: author CRUD, avatars, credential checks
    - FileService:   upload validation, storage and cleanup
    - security:      password hashing and access tokens
"""

# Services package init
"""
Blog Backend — Services Package
=================================

Business logic, independent of HTTP:
    - user_service.py:     signup and update (exposed through /users routes)
    - post_service.py:     create, read, soft delete, restore
    - comment_service.py:  create and list comments for a post
"""

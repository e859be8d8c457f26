# Services package init
"""
Guia Backend — Services Layer
===============================

What:  Business logic between routes (HTTP) and the database.
How:   Services receive an AsyncSession per call, flush but never commit,
       and raise GuiaError subclasses that main.py maps to status codes.

Service Inventory:
    - ListingService:  search and mutation pipelines, one per listing kind
    - form_parser:     multipart listing fields → column values
    - rating_service:  mean comment stars per listing
    - CommentService:  comment create/list/delete
    - UserService:     signup, users, login, Google sign-in
    - auth_service:    bcrypt, bearer tokens, Google identity tokens
    - MediaService:    image storage (CloudinaryMediaService, LocalMediaService)
"""

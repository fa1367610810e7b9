"""
Service layer abstraction.

Each service encapsulates the business rules for a domain and works on
a database connection handed to it by the caller.
"""

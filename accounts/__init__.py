"""
Users API application package.

Registration, authentication and user/profile management on MongoDB.
"""

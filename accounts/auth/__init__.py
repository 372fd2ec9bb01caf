"""
Auth System

Sign-up and sign-in with bcrypt-hashed passwords and stateless JWTs.
"""

from accounts.auth.pipelines import sign_up_pipeline, sign_in_pipeline

__all__ = ["sign_up_pipeline", "sign_in_pipeline"]

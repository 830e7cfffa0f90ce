"""OTP authentication package."""

from securefin.auth.session import AuthSession, generate_code

__all__ = ["AuthSession", "generate_code"]

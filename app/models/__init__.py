from app.models.invitation import Invitation
from app.models.guest import Guest
from app.models.session import AuthSession
from app.models.login_attempt import LoginAttempt

__all__ = ["Invitation", "Guest", "AuthSession", "LoginAttempt"]

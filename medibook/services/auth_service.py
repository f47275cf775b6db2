from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import datetime, timedelta
import logging

from ..core.config import settings
from ..models.user import User, RefreshToken
from ..models.patient import Patient
from ..models.doctor import Doctor
from ..core.security import (
    verify_password, get_password_hash, create_token_pair,
    verify_token, UserRole, generate_password_reset_token, hash_token
)
from ..schemas.auth import (
    UserLogin, UserRegister, TokenResponse, UserResponse,
    OAuthUserInfo, PasswordResetConfirm
)

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new user together with its patient or doctor profile."""
        existing_user = self.db.query(User).filter(
            User.email == user_data.email
        ).first()

        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        if user_data.role == UserRole.DOCTOR:
            taken = self.db.query(Doctor).filter(
                Doctor.license_number == user_data.license_number
            ).first()
            if taken:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="License number already registered"
                )

        new_user = User(
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            role=user_data.role,
            is_active=True,
            is_verified=False  # Require email verification
        )
        self.db.add(new_user)
        self.db.flush()

        if user_data.role == UserRole.DOCTOR:
            profile = Doctor(
                user_id=new_user.id,
                first_name=user_data.first_name,
                last_name=user_data.last_name,
                specialization=user_data.specialization,
                license_number=user_data.license_number,
                years_of_experience=user_data.years_of_experience,
                qualification=user_data.qualification,
                bio=user_data.bio,
                consultation_fee=user_data.consultation_fee,
                phone_number=user_data.phone_number,
                office_address=user_data.office_address,
            )
        else:
            profile = Patient(
                user_id=new_user.id,
                first_name=user_data.first_name,
                last_name=user_data.last_name,
                date_of_birth=user_data.date_of_birth,
                gender=user_data.gender,
                phone_number=user_data.phone_number,
            )
        self.db.add(profile)

        self.db.commit()
        self.db.refresh(new_user)

        logger.info(f"Registered {new_user.role.value} user {new_user.id}")
        return new_user

    def authenticate_user(self, login_data: UserLogin) -> TokenResponse:
        """Authenticate user and return tokens."""
        user = self.db.query(User).filter(
            User.email == login_data.email
        ).first()

        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        # Check account lockout
        if user.locked_until and user.locked_until > datetime.utcnow():
            raise HTTPException(
                status_code=status.HTTP_423_LOCKED,
                detail="Account is temporarily locked"
            )

        if not user.password_hash or not verify_password(
            login_data.password, user.password_hash
        ):
            self._handle_failed_login(user)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated"
            )

        user.failed_login_attempts = 0
        user.locked_until = None
        user.last_login = datetime.utcnow()

        return self._issue_tokens(user)

    def refresh_access_token(self, refresh_token: str) -> TokenResponse:
        """Refresh access token using refresh token."""
        token_payload = verify_token(refresh_token)
        if not token_payload or token_payload.token_type != "refresh":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid refresh token"
            )

        stored_token = self.db.query(RefreshToken).filter(
            RefreshToken.token_hash == hash_token(refresh_token),
            RefreshToken.is_revoked == False,  # noqa: E712
            RefreshToken.expires_at > datetime.utcnow()
        ).first()

        if not stored_token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired refresh token"
            )

        user = self.db.query(User).filter(
            User.id == token_payload.sub
        ).first()

        if not user or not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found or inactive"
            )

        return self._issue_tokens(user)

    def logout_user(self, refresh_token: str) -> bool:
        """Logout user by revoking refresh token."""
        stored_token = self.db.query(RefreshToken).filter(
            RefreshToken.token_hash == hash_token(refresh_token)
        ).first()

        if not stored_token:
            return False

        stored_token.is_revoked = True
        self.db.commit()
        return True

    def oauth_login(self, oauth_data: OAuthUserInfo) -> TokenResponse:
        """Handle OAuth login/registration."""
        user = self.db.query(User).filter(
            User.oauth_provider == oauth_data.provider,
            User.oauth_id == oauth_data.oauth_id
        ).first()

        if not user:
            user = self.db.query(User).filter(
                User.email == oauth_data.email
            ).first()

            if user:
                # Link OAuth account to existing user
                user.oauth_provider = oauth_data.provider
                user.oauth_id = oauth_data.oauth_id
            else:
                user = User(
                    email=oauth_data.email,
                    role=UserRole.PATIENT,  # Default role for OAuth users
                    oauth_provider=oauth_data.provider,
                    oauth_id=oauth_data.oauth_id,
                    is_active=True,
                    is_verified=True  # OAuth users are pre-verified
                )
                self.db.add(user)
                self.db.flush()
                self.db.add(Patient(
                    user_id=user.id,
                    first_name=oauth_data.first_name or "",
                    last_name=oauth_data.last_name or "",
                ))

        user.last_login = datetime.utcnow()
        return self._issue_tokens(user)

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not user.password_hash or not verify_password(current_password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect"
            )

        user.password_hash = get_password_hash(new_password)
        self.db.commit()

    def request_password_reset(self, email: str) -> bool:
        """Generate password reset token."""
        user = self.db.query(User).filter(User.email == email).first()
        if not user:
            # Don't reveal if email exists
            return True

        user.password_reset_token = generate_password_reset_token()
        user.password_reset_expires = datetime.utcnow() + timedelta(hours=1)

        self.db.commit()
        logger.info(f"Password reset requested for user {user.id}")
        return True

    def reset_password(self, reset_data: PasswordResetConfirm) -> bool:
        """Reset password using reset token."""
        user = self.db.query(User).filter(
            User.password_reset_token == reset_data.token,
            User.password_reset_expires > datetime.utcnow()
        ).first()

        if not user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired reset token"
            )

        user.password_hash = get_password_hash(reset_data.new_password)
        user.password_reset_token = None
        user.password_reset_expires = None
        user.failed_login_attempts = 0
        user.locked_until = None

        # Revoke all refresh tokens
        self.db.query(RefreshToken).filter(
            RefreshToken.user_id == user.id
        ).update({"is_revoked": True})

        self.db.commit()
        return True

    def set_user_active(self, user_id: int, is_active: bool) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        user.is_active = is_active
        self.db.commit()
        return user

    def _handle_failed_login(self, user: User):
        """Count a failed attempt and lock the account past the threshold."""
        # An expired lockout starts a fresh count
        if user.locked_until and user.locked_until <= datetime.utcnow():
            user.failed_login_attempts = 0
            user.locked_until = None

        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1

        if user.failed_login_attempts >= settings.MAX_FAILED_LOGINS:
            user.locked_until = datetime.utcnow() + timedelta(minutes=settings.LOCKOUT_MINUTES)
            logger.warning(f"User {user.id} locked after {user.failed_login_attempts} failed logins")

        self.db.commit()

    def _issue_tokens(self, user: User) -> TokenResponse:
        """Create a token pair, store the refresh token and commit."""
        tokens = create_token_pair(user.id, user.email, user.role)
        self._store_refresh_token(user.id, tokens.refresh_token)

        self.db.commit()
        self.db.refresh(user)

        return TokenResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type=tokens.token_type,
            expires_in=tokens.expires_in,
            user=UserResponse.model_validate(user)
        )

    def _store_refresh_token(self, user_id: int, refresh_token: str):
        """Store refresh token in database, revoking the previous ones."""
        token_payload = verify_token(refresh_token)
        expires_at = (
            datetime.utcfromtimestamp(token_payload.exp)
            if token_payload and token_payload.exp
            else datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        )

        self.db.query(RefreshToken).filter(
            RefreshToken.user_id == user_id
        ).update({"is_revoked": True})

        self.db.add(RefreshToken(
            user_id=user_id,
            token_hash=hash_token(refresh_token),
            expires_at=expires_at
        ))

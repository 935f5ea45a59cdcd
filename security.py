import bcrypt
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException, status
import jwt

from config import ACCESS_TOKEN_EXPIRE_MINUTES, BCRYPT_ROUNDS


class SecurityManager:
    def __init__(self, secret_key: str, rounds: int = BCRYPT_ROUNDS):
        self.secret_key = secret_key
        self.algorithm = "HS256"
        self.access_token_expire_minutes = ACCESS_TOKEN_EXPIRE_MINUTES
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """Generate a salted password hash"""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def verify_password(self, password: str, hashed: str) -> bool:
        """Verify password against hash"""
        try:
            return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
        except ValueError:
            # malformed hash
            return False

    def create_access_token(self, user_id: str) -> str:
        """Issue a signed token whose subject is the user id"""
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.access_token_expire_minutes)
        return jwt.encode({"sub": user_id, "exp": expire}, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> str:
        """Return the user id carried by a valid token"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired"
            )
        except jwt.InvalidTokenError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token"
            )
        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has no subject"
            )
        return user_id

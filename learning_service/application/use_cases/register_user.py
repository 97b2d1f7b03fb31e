from ...domain.entities import ROLE_USER, User
from ...domain.errors import ConflictError, InvalidCredentials


class IUserRepository:
    def get_by_username(self, username: str) -> User | None: ...
    def get_password_hash(self, username: str) -> tuple[User, str] | None: ...
    def create(self, username: str, password_hash: str, role: str = ROLE_USER) -> User: ...


class IPasswordHasher:
    def hash(self, plain: str) -> str: ...
    def verify(self, plain: str, hashed: str) -> bool: ...


class RegisterUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, username: str, password: str, role: str = ROLE_USER) -> User:
        username = username.strip()
        if not username:
            raise ValueError("Username must not be empty")
        if self.repo.get_by_username(username):
            raise ConflictError("Registration error, user already exists.")
        pwd_hash = self.hasher.hash(password)
        return self.repo.create(username, pwd_hash, role)


class AuthenticateUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, username: str, password: str) -> User:
        found = self.repo.get_password_hash(username.strip())
        if not found or not self.hasher.verify(password, found[1]):
            raise InvalidCredentials("Invalid credentials")
        return found[0]

import enum


class DeploymentEnvironment(enum.Enum):
    Production = "production"
    Development = "development"
    Staging = "staging"
    Test = "test"
    Local = "local"


class UserRole(enum.Enum):
    Student = "student"
    Faculty = "faculty"
    Admin = "admin"

    @property
    def is_privileged(self) -> bool:
        return self in (UserRole.Faculty, UserRole.Admin)


class PresenceStatus(enum.Enum):
    Online = "online"
    Offline = "offline"

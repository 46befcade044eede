from enum import Enum


class SessionEvent(Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"

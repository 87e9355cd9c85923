from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Tài khoản đăng nhập: giảng viên, sinh viên hoặc quản trị.

    A teacher owns class sessions and issues their QR codes; a student appears
    in session rosters by ``user_id`` and scans to check in.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    is_active: bool = True

    @property
    def can_sign_in(self) -> bool:
        # Disabled accounts keep their attendance history but cannot log in.
        return self.is_active and bool(self.password_hash)

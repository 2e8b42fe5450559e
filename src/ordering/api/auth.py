"""Identity resolved by upstream auth middleware, read from request headers."""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException


@dataclass(frozen=True)
class Caller:
    customer_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def current_caller(
    x_customer_id: str | None = Header(default=None),
    x_customer_role: str = Header(default="customer"),
) -> Caller:
    if not x_customer_id:
        raise HTTPException(status_code=401, detail="Not authorized, no customer identity")
    return Caller(customer_id=x_customer_id, role=x_customer_role.lower())


def admin_caller(caller: Caller = Depends(current_caller)) -> Caller:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Not authorized as an admin")
    return caller

from __future__ import annotations

from contextvars import ContextVar


_TENANT_CTX: ContextVar[str | None] = ContextVar("tenant", default=None)
_IDENTITY_CTX: ContextVar[str | None] = ContextVar("identity", default=None)
_MESSAGE_ID_CTX: ContextVar[str | None] = ContextVar("message_id", default=None)


def set_message_context(
    *, tenant: str | None = None, identity: str | None = None, message_id: str | None = None
) -> None:
    if tenant is not None:
        _TENANT_CTX.set(tenant)
    if identity is not None:
        _IDENTITY_CTX.set(identity)
    if message_id is not None:
        _MESSAGE_ID_CTX.set(message_id)


def get_tenant() -> str | None:
    return _TENANT_CTX.get()


def get_identity() -> str | None:
    return _IDENTITY_CTX.get()


def get_message_id() -> str | None:
    return _MESSAGE_ID_CTX.get()


def clear_message_context() -> None:
    _TENANT_CTX.set(None)
    _IDENTITY_CTX.set(None)
    _MESSAGE_ID_CTX.set(None)

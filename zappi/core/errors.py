from __future__ import annotations


class CatalogError(ValueError):
    """Cardápio inválido: o agente do estabelecimento não deve iniciar."""

    def __init__(self, tenant: str, problems: list[str]) -> None:
        self.tenant = tenant
        self.problems = list(problems)
        super().__init__(f"[{tenant}] cardápio inválido: {'; '.join(self.problems)}")


class CatalogNotFound(CatalogError):
    pass


class PersistenceError(RuntimeError):
    """Falha ao gravar sessão, cooldown ou pedido; a mensagem não foi tratada."""


class TransportError(RuntimeError):
    """Falha de envio reportada pelo provedor de mensagens."""


class UnknownTenant(LookupError):
    pass


class AgentStopped(RuntimeError):
    """O agente do estabelecimento foi parado antes de tratar a mensagem."""

from .token_gateway import LedgerTokenGateway

__all__ = ("LedgerTokenGateway",)

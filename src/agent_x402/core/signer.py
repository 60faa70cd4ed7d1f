"""
Signing capabilities used to authorise x402 payments.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, runtime_checkable

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount

__all__ = ["LocalAccountSigner", "Signer"]


@runtime_checkable
class Signer(Protocol):
    """
    Anything that can report an address and sign an EIP-712 document.

    ``typed_data`` is the full EIP-712 structure (``types``, ``primaryType``,
    ``domain`` and ``message``); the return value is a 0x-prefixed hex
    signature.
    """

    @property
    def address(self) -> str:
        ...

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        ...


class LocalAccountSigner:
    """
    :class:`Signer` backed by an in-process ``eth_account`` key.
    """

    def __init__(self, private_key: str) -> None:
        self._account: LocalAccount = Account.from_key(private_key)

    @classmethod
    def from_account(cls, account: LocalAccount) -> "LocalAccountSigner":
        signer = cls.__new__(cls)
        signer._account = account
        return signer

    @property
    def address(self) -> str:
        return self._account.address

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        signable = encode_typed_data(full_message=typed_data)
        signature = self._account.sign_message(signable).signature
        return "0x" + bytes(signature).hex()

    def __repr__(self) -> str:
        return f"LocalAccountSigner(address={self.address!r})"

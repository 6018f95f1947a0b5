"""OV settlement token reads (balance / allowance)."""
from __future__ import annotations

from web3 import AsyncWeb3

from .abi import ERC20_ABI


class OverlayTokenReader:
    def __init__(self, web3: AsyncWeb3, token_address: str) -> None:
        self._w3 = web3
        self._token_address = AsyncWeb3.to_checksum_address(token_address)

    @property
    def address(self) -> str:
        return self._token_address

    def _functions(self):
        return self._w3.eth.contract(address=self._token_address, abi=ERC20_ABI).functions

    async def balance(self, account: str) -> int:
        return int(
            await self._functions().balanceOf(AsyncWeb3.to_checksum_address(account)).call()
        )

    async def allowance(self, account: str, spender: str) -> int:
        return int(
            await self._functions()
            .allowance(
                AsyncWeb3.to_checksum_address(account),
                AsyncWeb3.to_checksum_address(spender),
            )
            .call()
        )

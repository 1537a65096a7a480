from __future__ import annotations

from web3 import Web3

from .base import BaseBalanceAdapter


class EVMAdapter(BaseBalanceAdapter):
    """Adapter for ``eth_getBalance`` over JSON-RPC.

    One address may be shared by several EVM networks; every RPC URL is
    queried on its own so a failing network only zeroes its own share.
    """

    @property
    def adapter_name(self) -> str:
        return "evm"

    async def _fetch_balance(self, endpoint_url: str) -> float:
        w3 = Web3(
            Web3.HTTPProvider(endpoint_url, request_kwargs={"timeout": self.timeout})
        )
        address = Web3.to_checksum_address(self.chain.address)
        wei = await self._run_blocking(w3.eth.get_balance, address, "latest")
        return self.to_native_units(int(wei))
